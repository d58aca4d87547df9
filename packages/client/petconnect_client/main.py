"""
Command-line entry point.

Loads configuration, configures logging, logs in with the configured account
and runs one sub-command against the catalog:

    petconnect board [--query Q] [--category C] [--state UF] [--urgent]
    petconnect inventory
    petconnect requests
    petconnect approve REQUEST_ID | reject REQUEST_ID
    petconnect request TYPE RESOURCE_ID
    petconnect show TYPE RESOURCE_ID
    petconnect add TYPE --name ... [--quantity ...] [--expiration-date YYYY-MM-DD] ...
    petconnect edit TYPE RESOURCE_ID [--quantity ...] ...
    petconnect register --name ... --email ...
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import uuid

import structlog
from pydantic import ValidationError as SchemaError

from petconnect_shared.board import DonationBoard, DonationFilters
from petconnect_shared.schemas.common import ResourceType
from petconnect_shared.schemas.organizations import OrganizationProfile
from petconnect_shared.schemas.resources import READ_SCHEMAS, Resource, display_name, expiration_of, quantity_label

from .catalog import CatalogCache, RequestQueueItem, ResourceDetail
from .config import ClientConfig, load_config
from .errors import GatewayError
from .gateway import ApiGateway
from .session import SessionManager


def configure_logging(level: str = "info", fmt: str = "json") -> None:
    """Configure structlog with the specified level and format."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            structlog.get_level_from_name(level)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _resource_line(resource: Resource) -> str:
    line = f"[{resource.resource_type}] {display_name(resource)} ({quantity_label(resource)})"
    expiration = expiration_of(resource)
    if expiration is not None:
        line += f" expires {expiration.isoformat()}"
    return line


def format_board(board: DonationBoard) -> str:
    if not board.items:
        return "No donations match these filters."
    lines = []
    for item in board.items:
        urgent = " URGENT" if item.urgent else ""
        lines.append(
            f"{item.resource.id}  {_resource_line(item.resource)}{urgent}"
            f" | {item.organization.name}, {item.organization.city}/{item.organization.state}"
        )
    lines.append(f"States: {', '.join(board.states)}")
    return "\n".join(lines)


def format_inventory(resources: list[Resource]) -> str:
    if not resources:
        return "No resources listed yet."
    return "\n".join(f"{r.id}  {_resource_line(r)} [{r.status.value}]" for r in resources)


def format_queue(items: list[RequestQueueItem]) -> str:
    if not items:
        return "No pending requests."
    lines = []
    for item in items:
        what = display_name(item.resource) if item.resource else "(unknown resource)"
        who = item.requester.name if item.requester else "(unknown organization)"
        lines.append(f"{item.request.id}  {who} asks for {what} [{item.request.status.value}]")
    return "\n".join(lines)


_SYSTEM_FIELDS = {"id", "created_at", "organization_id", "status", "resource_type", "photo_base64"}


def format_detail(detail: ResourceDetail) -> str:
    resource = detail.resource
    lines = [f"{resource.id}  {_resource_line(resource)} [{resource.status.value}]"]
    for field, value in resource.model_dump(mode="json", exclude=_SYSTEM_FIELDS).items():
        if value is not None:
            lines.append(f"  {field}: {value}")
    if detail.owner:
        lines.append(f"  offered by: {detail.owner.name}, {detail.owner.city}/{detail.owner.state}")
    for req in detail.requests:
        lines.append(f"  request {req.id} [{req.status.value}]")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def cmd_board(catalog: CatalogCache, args: argparse.Namespace) -> int:
    filters = DonationFilters(
        query=args.query, category=args.category, state=args.state, urgent_only=args.urgent
    )
    print(format_board(catalog.donation_board(filters)))
    return 0


async def cmd_inventory(catalog: CatalogCache, args: argparse.Namespace) -> int:
    print(format_inventory(catalog.inventory()))
    return 0


async def cmd_requests(catalog: CatalogCache, args: argparse.Namespace) -> int:
    print(format_queue(catalog.request_queue()))
    return 0


async def cmd_approve(catalog: CatalogCache, args: argparse.Namespace) -> int:
    req = await catalog.approve_request(args.request_id)
    print(f"Request {req.id} approved.")
    return 0


async def cmd_reject(catalog: CatalogCache, args: argparse.Namespace) -> int:
    req = await catalog.reject_request(args.request_id)
    print(f"Request {req.id} rejected.")
    return 0


async def cmd_request(catalog: CatalogCache, args: argparse.Namespace) -> int:
    resource = catalog.find_resource(args.resource_type, args.resource_id)
    if resource is None:
        print(f"No {args.resource_type.value} resource with id {args.resource_id}.", file=sys.stderr)
        return 1
    req = await catalog.request_resource(resource)
    print(f"Requested {display_name(resource)} (request {req.id}).")
    return 0


RESOURCE_FIELDS = (
    "name",
    "active_ingredient",
    "brand",
    "quantity",
    "quantity_kg",
    "expiration_date",
    "category",
    "condition",
    "size_specification",
    "notes",
)


def _resource_fields(args: argparse.Namespace) -> dict:
    """Field options given on the command line; the variant schema validates them."""
    return {f: getattr(args, f) for f in RESOURCE_FIELDS if getattr(args, f, None) is not None}


async def cmd_show(catalog: CatalogCache, args: argparse.Namespace) -> int:
    detail = await catalog.resource_detail(args.resource_type, args.resource_id)
    if detail is None:
        print(f"No {args.resource_type.value} resource with id {args.resource_id}.", file=sys.stderr)
        return 1
    print(format_detail(detail))
    return 0


async def cmd_add(catalog: CatalogCache, args: argparse.Namespace) -> int:
    created = await catalog.add_resource(args.resource_type, _resource_fields(args))
    print(f"Added {display_name(created)} ({created.id}).")
    return 0


async def cmd_edit(catalog: CatalogCache, args: argparse.Namespace) -> int:
    resource = catalog.find_resource(args.resource_type, args.resource_id)
    if resource is None:
        print(f"No {args.resource_type.value} resource with id {args.resource_id}.", file=sys.stderr)
        return 1
    record = READ_SCHEMAS[args.resource_type].model_validate(
        {**resource.model_dump(), **_resource_fields(args)}
    )
    updated = await catalog.update_resource(args.resource_type, record)
    print(f"Updated {display_name(updated)} ({updated.id}).")
    return 0


COMMANDS = {
    "board": cmd_board,
    "inventory": cmd_inventory,
    "requests": cmd_requests,
    "approve": cmd_approve,
    "reject": cmd_reject,
    "request": cmd_request,
    "show": cmd_show,
    "add": cmd_add,
    "edit": cmd_edit,
}


async def run_command(config: ClientConfig, args: argparse.Namespace, transport=None) -> int:
    """Open a gateway, run one command, close everything again."""
    log = structlog.get_logger()
    gateway = ApiGateway(
        config.server.url,
        verify_tls=config.server.verify_tls,
        request_timeout=config.server.request_timeout_seconds,
        transport=transport,
    )
    await gateway.open()
    session = SessionManager(gateway)
    catalog = CatalogCache(gateway, session, window_days=config.board.urgency_window_days)
    try:
        if args.command == "register":
            profile = OrganizationProfile(
                name=args.name,
                cnpj=args.cnpj,
                city=args.city,
                state=args.state,
                contact_email=args.email,
                contact_phone=args.phone,
            )
            org = await session.register_ngo(profile, config.account.password or "")
            print(f"Registered {org.name}; status {org.status.value} until verified.")
            return 0

        if not config.account.email or not config.account.password:
            print(
                f"Error: set account.email and the {config.account.password_env} environment variable.",
                file=sys.stderr,
            )
            return 2

        await session.login(config.account.email, config.account.password)
        if session.awaiting_approval:
            print("Your organization is awaiting approval; you can browse but not donate or request.")
        if catalog.error:
            print(f"Warning: {catalog.error}", file=sys.stderr)
        return await COMMANDS[args.command](catalog, args)
    except GatewayError as exc:
        log.debug("cli.command_failed", command=args.command, error=exc.message)
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    except SchemaError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 1
    finally:
        if session.is_authenticated:
            await session.logout()
        await gateway.close()


def _add_resource_type(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "resource_type",
        type=ResourceType,
        choices=list(ResourceType),
        metavar="{medicines,rations,articles}",
    )


def _add_field_options(parser: argparse.ArgumentParser) -> None:
    for field in RESOURCE_FIELDS:
        parser.add_argument("--" + field.replace("_", "-"), dest=field)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PetConnect donation board client")
    parser.add_argument(
        "-c", "--config",
        default="petconnect.yaml",
        help="Path to configuration file (default: petconnect.yaml)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    board = sub.add_parser("board", help="Browse donations from other NGOs")
    board.add_argument("--query", default="", help="Name or brand contains")
    board.add_argument("--category", default="", help="medicines, rations or an article category")
    board.add_argument("--state", default="", help="Organization state (exact)")
    board.add_argument("--urgent", action="store_true", help="Only items expiring within the window")

    sub.add_parser("inventory", help="List your own resources")
    sub.add_parser("requests", help="List pending requests for your resources")

    for name in ("approve", "reject"):
        p = sub.add_parser(name, help=f"{name.capitalize()} a pending request")
        p.add_argument("request_id", type=uuid.UUID)

    request = sub.add_parser("request", help="Request another NGO's resource")
    _add_resource_type(request)
    request.add_argument("resource_id", type=uuid.UUID)

    show = sub.add_parser("show", help="Show one resource with its owner and requests")
    _add_resource_type(show)
    show.add_argument("resource_id", type=uuid.UUID)

    add = sub.add_parser("add", help="List a new resource for donation")
    _add_resource_type(add)
    _add_field_options(add)

    edit = sub.add_parser("edit", help="Change fields of one of your resources")
    _add_resource_type(edit)
    edit.add_argument("resource_id", type=uuid.UUID)
    _add_field_options(edit)

    register = sub.add_parser("register", help="Register a new NGO (password from the environment)")
    register.add_argument("--name", required=True)
    register.add_argument("--cnpj", required=True)
    register.add_argument("--city", required=True)
    register.add_argument("--state", required=True)
    register.add_argument("--email", required=True)
    register.add_argument("--phone", required=True)
    return parser


def run() -> None:
    """CLI entry point."""
    args = build_parser().parse_args()

    try:
        config = load_config(args.config)
    except FileNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except Exception as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.logging.level, config.logging.format)
    log = structlog.get_logger()
    log.info("cli.config_loaded", config_path=args.config, server=config.server.url)

    sys.exit(asyncio.run(run_command(config, args)))


if __name__ == "__main__":
    run()
