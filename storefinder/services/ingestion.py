"""
Record Ingestion Module.

Converts raw location records (as exported by a club directory) into
Locations and the universe of attributes they use. A bad field is dropped,
a record without usable coordinates is skipped; the batch never aborts.

Expected record shape::

    {
        "name": "Edinburgh Fencing Club",
        "institute": "University of Edinburgh",
        "street": "46 Pleasance",
        "city": "Edinburgh",
        "postcode": "EH8 9TJ",
        "email": "club@example.org",
        "coordinates": {"latitude": 55.94, "longitude": -3.18},
        "disciplines": [{"name": "Foil", "colour": "#c00"}]
    }
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from storefinder.core.attributes import Attribute, AttributeSet
from storefinder.core.exceptions import IngestionError
from storefinder.core.geo import LatLng
from storefinder.core.location import Location
from storefinder.services.data_feed import StaticDataFeed

logger = logging.getLogger(__name__)

# Shorter strings cannot be a real address and are shown as plain text.
MIN_LINKED_EMAIL_LENGTH = 8


def join_present(parts: Iterable[Any], separator: str) -> str:
    """
    Joins the truthy parts with a separator.

    Args:
        parts: Values to join. Empty and None values are skipped.
        separator: Separator string.
    """
    return separator.join(str(part) for part in parts if part)


def email_link(email: Any) -> Optional[str]:
    """Turns an email address into a mailto link when it looks usable."""
    if not isinstance(email, str) or not email:
        return None
    if len(email) < MIN_LINKED_EMAIL_LENGTH:
        return email
    return f'<a href="mailto:{email}">{email}</a>'


def attribute_for_discipline(discipline: Mapping[str, Any]) -> Optional[Attribute]:
    """
    Builds the attribute for a discipline entry.

    The display name carries a colour bullet when a colour is given.

    Returns:
        Optional[Attribute]: None when the entry has no name.
    """
    name = discipline.get("name") if isinstance(discipline, Mapping) else None
    if not name:
        return None
    colour = discipline.get("colour")
    if colour:
        display = f'<span class="bullet" style="background:{colour};"></span>{name}'
    else:
        display = str(name)
    return Attribute(str(name), display)


def _coordinates(record: Mapping[str, Any], record_id: str) -> LatLng:
    coordinates = record.get("coordinates")
    if not isinstance(coordinates, Mapping):
        raise IngestionError("missing coordinates", record_id)
    try:
        return LatLng(float(coordinates["latitude"]), float(coordinates["longitude"]))
    except (KeyError, TypeError, ValueError) as e:
        raise IngestionError(f"invalid coordinates: {e!r}", record_id) from e


def parse_record(
    record_id: str, record: Mapping[str, Any], universe: AttributeSet
) -> Location:
    """
    Converts one raw record into a Location.

    Attributes are registered in the universe as a side effect so every
    location shares one Attribute instance per id.

    Args:
        record_id: Key of the record, used as the Location id.
        record: Raw record.
        universe: Attribute universe to register disciplines in.

    Returns:
        Location: The parsed location.

    Raises:
        IngestionError: If the record has no usable coordinates.
    """
    if not isinstance(record, Mapping):
        raise IngestionError("record is not an object", record_id)

    position = _coordinates(record, record_id)

    attributes = AttributeSet()
    disciplines = record.get("disciplines") or []
    if not isinstance(disciplines, list):
        logger.warning(f"Record {record_id}: ignoring non-list disciplines")
        disciplines = []
    for discipline in disciplines:
        attribute = attribute_for_discipline(discipline)
        if attribute is None:
            continue
        if universe.get_by_id(attribute.id) is None:
            universe.add(attribute)
        attributes.add(universe.get_by_id(attribute.id))

    locale = join_present([record.get("city"), record.get("postcode")], ", ")
    details: Dict[str, Any] = {
        "title": join_present([record.get("name"), record.get("institute")], ", "),
        "address": '<div class="distance"></div>'
        + join_present([record.get("street"), locale, email_link(record.get("email"))], "<br/>"),
    }
    for optional in ("phone", "web", "misc"):
        if record.get(optional):
            details[optional] = record[optional]

    return Location(record_id, position, attributes, details)


@dataclass
class IngestionResult:
    """
    Outcome of a batch conversion.

    Attributes:
        locations: Parsed locations in record order.
        universe: Every attribute used by the batch.
        skipped: (record id, reason) for each record that was dropped.
    """

    locations: List[Location] = field(default_factory=list)
    universe: AttributeSet = field(default_factory=AttributeSet)
    skipped: List[Tuple[str, str]] = field(default_factory=list)


def _iter_records(records: Union[Mapping[str, Any], List[Any]]) -> Iterable[Tuple[str, Any]]:
    if isinstance(records, Mapping):
        return ((str(key), value) for key, value in records.items())
    return ((str(index), value) for index, value in enumerate(records))


def parse_records(
    records: Union[Mapping[str, Any], List[Any]],
    universe: Optional[AttributeSet] = None,
) -> IngestionResult:
    """
    Converts a batch of raw records.

    Args:
        records: Mapping of id to record, or a list (ids are the indexes).
        universe: Attribute universe to extend. A new one by default.

    Returns:
        IngestionResult: Locations, universe and skipped records.
    """
    result = IngestionResult(universe=universe if universe is not None else AttributeSet())
    for record_id, record in _iter_records(records):
        try:
            result.locations.append(parse_record(record_id, record, result.universe))
        except IngestionError as e:
            logger.warning(f"Skipping record {record_id}: {e}")
            result.skipped.append((record_id, str(e)))
    logger.info(
        f"Ingested {len(result.locations)} locations, "
        f"{len(result.universe)} attributes, {len(result.skipped)} skipped"
    )
    return result


def load_records(path: Union[str, Path]) -> Union[Mapping[str, Any], List[Any]]:
    """
    Reads raw records from a JSON file.

    Args:
        path: File holding an object of records or a list of records.

    Raises:
        IngestionError: If the file cannot be read or holds another JSON type.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise IngestionError(f"Cannot read records from {path}: {e}") from e
    if not isinstance(data, (dict, list)):
        raise IngestionError(f"{path} holds neither an object nor a list of records")
    return data


class RecordDataSource(StaticDataFeed):
    """
    StaticDataFeed populated from raw records, exposing their attribute
    universe for the filter panel.
    """

    def __init__(self, records: Union[Mapping[str, Any], List[Any], None] = None) -> None:
        super().__init__()
        self.features = AttributeSet()
        self.skipped: List[Tuple[str, str]] = []
        if records is not None:
            self.load(records)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "RecordDataSource":
        return cls(load_records(path))

    def load(self, records: Union[Mapping[str, Any], List[Any]]) -> IngestionResult:
        """Parses records into the feed, extending its attribute universe."""
        result = parse_records(records, self.features)
        self.skipped.extend(result.skipped)
        self.set_stores(result.locations)
        return result

    def get_features(self) -> AttributeSet:
        return self.features
