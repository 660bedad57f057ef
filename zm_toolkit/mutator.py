"""
Reading and writing monitor/zone parameters.

Writes are checked against the schema and unit-converted up front, then sent
one POST per parameter in the order given. There is no rollback: if the third
of five writes fails, the first two have already taken effect.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from .errors import TransportError
from .schema import AREA_RELATIVE_PARAMETERS, EntityKind, as_kind, validate_read, validate_write
from .units import UnitConverter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParameterWrite:
    name: str
    value: str    # as supplied
    stored: str   # as sent to the server


def _converter(kind: EntityKind, entity, names) -> Optional[UnitConverter]:
    if kind is not EntityKind.ZONE or not AREA_RELATIVE_PARAMETERS.intersection(names):
        return None
    return UnitConverter.for_zone(entity)


def _describe(kind: EntityKind, entity) -> str:
    return f"{kind.value} '{entity.name}' (ID: {entity.id})"


class ConfigMutator:
    def __init__(self, session):
        self.session = session

    def prepare(self, kind, entity, pairs: Sequence[tuple[str, str]]) -> list[ParameterWrite]:
        """
        Validate and unit-convert writes without sending anything.

        Raises:
            UnknownParameterError, EmptyValueError, InvalidEnumValueError: schema violations.
            RangeError: a threshold outside its percent or pixel bounds.
        """
        kind = as_kind(kind)
        for name, value in pairs:
            validate_write(kind, name, value)
        converter = _converter(kind, entity, [name for name, _ in pairs])
        writes = []
        for name, value in pairs:
            stored = converter.to_stored(name, value) if converter else value
            writes.append(ParameterWrite(name, value, stored))
        return writes

    def send(self, kind, entity, writes: Sequence[ParameterWrite]) -> list[ParameterWrite]:
        """
        POST each prepared write.

        Raises:
            TransportError: on the first write the server did not accept; it
                names the parameter, and earlier writes stay applied.
        """
        kind = as_kind(kind)
        path = f"{kind.collection}/{entity.id}.json"
        applied = []
        for write in writes:
            field = f"{kind.api_name}[{write.name}]"
            if not self.session.post_form(path, {field: write.stored}):
                raise TransportError(
                    f"Setting {write.name} on {_describe(kind, entity)} failed: {self.session.last_error}",
                    url=self.session.api(path), parameter=write.name,
                )
            if write.stored != write.value:
                logger.info(f"Set {write.name}={write.value} ({write.stored} px) on {_describe(kind, entity)}")
            else:
                logger.info(f"Set {write.name}={write.value} on {_describe(kind, entity)}")
            applied.append(write)
        return applied

    def apply(self, kind, entity, pairs: Sequence[tuple[str, str]]) -> list[ParameterWrite]:
        return self.send(kind, entity, self.prepare(kind, entity, pairs))


def read_parameter(kind, entity, name: str):
    """
    Display value of one parameter.

    Returns a string, None when the field has no stored value, or for the
    monitor zone listing a list of ``"<id>: <name>"`` strings.
    """
    kind = as_kind(kind)
    spec = validate_read(kind, name)
    if spec is None:
        return [f"{zone.id}: {zone.name}" for zone in entity.zones]
    stored = entity.fields.get(name)
    if kind is EntityKind.ZONE and name in AREA_RELATIVE_PARAMETERS:
        if stored is None or stored == "":
            return None
        return UnitConverter.for_zone(entity).to_display(name, stored)
    if stored is None:
        return None
    return str(stored)
