"""Coordinate reference system lookup, parsing and runtime authority registry."""

import logging
import re
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pyproj
from rasterio.crs import CRS
from rasterio.errors import CRSError

from magellan.errors import CrsLookupError, CrsParseError, NotFoundError

CODE_RE = re.compile(r"^\s*([A-Za-z][\w.\-]*)\s*:\s*([\w.\-]+)\s*$")

# Process-wide authority registry: AUTHORITY -> {code: CRS}.
# Append-only. Written only by register_authority_definitions and read by
# every later decode_crs / crs_to_code call in the process.
_AUTHORITY_REGISTRY: Dict[str, Dict[str, CRS]] = {}
_REGISTRY_LOCK = threading.Lock()

CrsLike = Union[CRS, str, int, Enum]


@dataclass(frozen=True)
class Projection:
    """
    Map projection of a projected CRS: the conversion name, its method and
    the ordered (parameter name, value) pairs.
    """
    name: str
    method: str
    parameters: Tuple[Tuple[str, float], ...]


def decode_crs(code: Union[str, int, Enum]) -> CRS:
    """
    Resolve an authority code such as "EPSG:3857" to a CRS handle.

    Authorities registered at runtime are consulted first, then the PROJ
    database. Integers are treated as EPSG codes.

    Args:
        code: Authority code string, EPSG integer, or a configs.CRS member

    Returns:
        CRS: Resolved coordinate reference system

    Raises:
        CrsLookupError: If the code cannot be resolved
    """
    if isinstance(code, Enum):
        code = code.value
    if isinstance(code, int):
        code = f"EPSG:{code}"
    if not isinstance(code, str) or not code.strip():
        raise CrsLookupError(f"Not a CRS code: {code!r}")

    match = CODE_RE.match(code)
    try:
        if match is None:
            return CRS.from_user_input(code)
        authority, local_code = match.group(1).upper(), match.group(2)
        registered = _AUTHORITY_REGISTRY.get(authority, {}).get(local_code)
        if registered is not None:
            return registered
        if authority == "EPSG":
            return CRS.from_epsg(int(local_code))
        return CRS.from_authority(authority, local_code)
    except (CRSError, ValueError) as e:
        raise CrsLookupError(f"Unknown CRS code {code!r}: {e}") from e


def parse_crs_wkt(wkt: str) -> CRS:
    """
    Parse a well-known-text CRS definition.

    Raises:
        CrsParseError: If the WKT is empty or malformed
    """
    if not isinstance(wkt, str) or not wkt.strip():
        raise CrsParseError("Empty WKT definition")
    try:
        return CRS.from_wkt(wkt)
    except CRSError as e:
        raise CrsParseError(f"Malformed WKT: {e}") from e


def crs_to_code(crs: CRS) -> Optional[str]:
    """
    Best-effort reverse lookup of the authority code for a CRS.
    Returns None when no authority matches.
    """
    try:
        authority = crs.to_authority()
    except CRSError:
        authority = None
    if authority is not None:
        return f"{authority[0]}:{authority[1]}"

    with _REGISTRY_LOCK:
        snapshot = [(a, dict(codes)) for a, codes in _AUTHORITY_REGISTRY.items()]
    for authority_name, codes in snapshot:
        for local_code, registered in codes.items():
            if registered == crs:
                return f"{authority_name}:{local_code}"
    return None


def crs_to_wkt(crs: CRS) -> str:
    return crs.to_wkt()


def ensure_crs(value: CrsLike) -> CRS:
    """
    Accept either a CRS handle or anything decode_crs understands.
    """
    if isinstance(value, CRS):
        return value
    return decode_crs(value)


def crs_projection(crs: CRS) -> Optional[Projection]:
    """
    Describe the map projection of `crs`, or None for geographic systems.
    """
    pp_crs = pyproj.CRS.from_wkt(crs.to_wkt())
    if pp_crs.is_bound:
        pp_crs = pp_crs.source_crs
    if pp_crs.is_compound:
        pp_crs = pp_crs.sub_crs_list[0]
    if not pp_crs.is_projected:
        return None
    op = pp_crs.coordinate_operation
    if op is None:
        return None
    return Projection(
        name=op.name,
        method=op.method_name,
        parameters=tuple((p.name, float(p.value)) for p in op.params),
    )


def _split_property(line: str) -> Tuple[str, str]:
    positions = [i for i in (line.find("="), line.find(":")) if i >= 0]
    if not positions:
        raise CrsParseError(f"Missing '=' separator in definition line: {line[:60]!r}")
    sep = min(positions)
    return line[:sep].strip(), line[sep + 1:].strip()


def read_definitions_file(path: Union[str, Path]) -> Dict[str, str]:
    """
    Read a properties-style file of `code = definition` entries.

    Lines starting with '#' or '!' are comments, a trailing backslash
    continues the definition on the next line.
    """
    entries: Dict[str, str] = {}
    pending = ""
    with open(path, "r", encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if not pending and (not line or line[0] in "#!"):
                continue
            if line.endswith("\\"):
                pending += line[:-1]
                continue
            line = pending + line
            pending = ""
            if not line:
                continue
            key, value = _split_property(line)
            if not key or not value:
                raise CrsParseError(f"Incomplete definition line: {line[:60]!r}")
            entries[key] = value
    if pending:
        key, value = _split_property(pending)
        entries[key] = value
    return entries


def register_authority_definitions(authority_name: str, path: Union[str, Path]) -> List[str]:
    """
    Register CRS definitions from a properties file under `authority_name`.

    Affects every later decode_crs call in the process. There is no way to
    unregister; codes that are already registered for the authority keep
    their first definition.

    Args:
        authority_name: Authority namespace, e.g. "CALFIRE"
        path: Properties file of `code = WKT-or-PROJ` entries

    Returns:
        list[str]: Codes newly registered by this call

    Raises:
        NotFoundError: If `path` does not exist
        CrsParseError: If any definition cannot be parsed
    """
    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"No such CRS definitions file: {path}")
    authority = authority_name.strip().upper()
    if not authority:
        raise ValueError("authority_name must not be empty")

    try:
        definitions = read_definitions_file(path)
    except UnicodeDecodeError as e:
        raise CrsParseError(f"CRS definitions file {path} is not valid UTF-8: {e}") from e

    parsed: Dict[str, CRS] = {}
    for local_code, definition in definitions.items():
        try:
            parsed[local_code] = CRS.from_user_input(definition)
        except CRSError as e:
            raise CrsParseError(f"Bad definition for {authority}:{local_code}: {e}") from e

    added = []
    with _REGISTRY_LOCK:
        codes = _AUTHORITY_REGISTRY.setdefault(authority, {})
        for local_code, crs in parsed.items():
            if local_code in codes:
                logging.warning(f"{authority}:{local_code} already registered, keeping first definition")
                continue
            codes[local_code] = crs
            added.append(local_code)

    logging.info(f"Registered {len(added)} CRS definitions under {authority} from {path}")
    return added


def registered_authorities() -> List[str]:
    with _REGISTRY_LOCK:
        return sorted(_AUTHORITY_REGISTRY)
