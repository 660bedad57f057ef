"""
Monitor and zone configuration tool.

Usage:
zm-config get Lawn Function Status Zones
zm-config get Lawn Driveway MinAlarmPixels MaxAlarmPixels
zm-config set Lawn Function:Modect Driveway MinAlarmPixels:5 MaxAlarmPixels:40

After the monitor key, each argument is a monitor parameter or a zone id/name.
Arguments after a zone key apply to that zone while they name zone parameters.
Area-relative thresholds of a zone in Percent mode are read and written as
percentages of the zone's area.
"""
import argparse
import sys
from dataclasses import dataclass, field

from ..errors import MalformedParameterError, UnknownParameterError
from ..mutator import ConfigMutator, read_parameter
from ..registry import EntityResolver, TokenKind
from ..schema import PARAMETER_DELIMITER, SCHEMA, EntityKind, is_parameter_name, parse_parameter_token
from .common import add_connection_arguments, connect, logger, run_main


@dataclass
class Target:
    kind: EntityKind
    entity: object
    tokens: list = field(default_factory=list)


def split_targets(resolver: EntityResolver, monitor, tokens) -> list[Target]:
    """
    Group arguments by the monitor or zone they apply to.

    Raises:
        UnknownParameterError: an argument is neither a parameter of the
            monitor nor one of its zones.
    """
    monitor_target = Target(EntityKind.MONITOR, monitor)
    targets = [monitor_target]
    current = monitor_target
    for token in tokens:
        name = token.split(PARAMETER_DELIMITER, 1)[0]
        if current.kind is EntityKind.ZONE and is_parameter_name(EntityKind.ZONE, name):
            current.tokens.append(token)
            continue
        token_class = resolver.classify_token(monitor.id, token)
        if token_class.kind is TokenKind.MONITOR_PARAMETER:
            current = monitor_target
            current.tokens.append(token)
        elif token_class.kind is TokenKind.ZONE:
            current = Target(EntityKind.ZONE, token_class.zone)
            targets.append(current)
        else:
            raise UnknownParameterError(
                f"'{token}' is neither a parameter of monitor '{monitor.name}' nor one of its zones",
                field_name=token,
            )
    return targets


def _print_value(prefix: str, name: str, value) -> None:
    if value is None:
        return
    if isinstance(value, list):
        print(f"{prefix}{name}:")
        for line in value:
            print(f"  {line}")
        return
    print(f"{prefix}{name}: {value}")


def show(targets) -> None:
    # Read (and so validate) everything before printing anything.
    rows = []
    for target in targets:
        for token in target.tokens:
            if PARAMETER_DELIMITER in token:
                raise MalformedParameterError(f"'{token}' carries a value; use 'set' to change parameters",
                                              field_name=token)
        names = list(target.tokens)
        if not names and target.kind is EntityKind.MONITOR and len(targets) > 1:
            continue
        if not names:
            names = [p.name for p in SCHEMA[target.kind].values() if p.readable]
        prefix = f"{target.entity.name}/" if target.kind is EntityKind.ZONE else ""
        rows.extend((prefix, name, read_parameter(target.kind, target.entity, name)) for name in names)
    for prefix, name, value in rows:
        _print_value(prefix, name, value)


def update(mutator: ConfigMutator, targets) -> int:
    # Parse, validate and convert everything before the first POST.
    prepared = []
    for target in targets:
        pairs = [parse_parameter_token(token) for token in target.tokens]
        if pairs:
            prepared.append((target, mutator.prepare(target.kind, target.entity, pairs)))
    if not prepared:
        logger.warning("Nothing to set.")
        return 0
    for target, writes in prepared:
        mutator.send(target.kind, target.entity, writes)
    return sum(len(writes) for _, writes in prepared)


def main(args):
    """Main execution logic for the configuration tool."""
    session, registry = connect(args)
    with session:
        resolver = EntityResolver(registry)
        monitor = resolver.monitor(args.monitor)
        targets = split_targets(resolver, monitor, args.params)
        if args.action == "get":
            show(targets)
        else:
            count = update(ConfigMutator(session), targets)
            logger.info(f"Applied {count} change(s).")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Read or change monitor and zone parameters.")
    add_connection_arguments(parser)
    parser.add_argument("action", choices=("get", "set"), help="Read parameters, or write Name:Value pairs.")
    parser.add_argument("monitor", help="Monitor id or name.")
    parser.add_argument("params", nargs="*",
                        help="Parameter names (get) or Name:Value pairs (set), optionally after a zone id or name.")
    return parser


def run(argv=None) -> int:
    args = build_parser().parse_args(argv)
    return run_main(main, args)


if __name__ == "__main__":
    sys.exit(run())
