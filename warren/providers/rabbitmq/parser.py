"""
Parser de la salida tabular de rabbitmqctl (list_*).

Cada línea es `<clave> <campo_1> ... <campo_k>`. rabbitmqctl separa columnas con
un tabulador, por lo que una columna vacía aparece como dos tabuladores seguidos.
Cada tabulador es un separador; una racha de espacios cuenta como uno solo
(relleno irregular), y ambos pueden mezclarse en la misma línea.

parse_line no lanza: devuelve un resultado etiquetado (ParsedRecord, NoMatch o
ParseFailure) y quien llama decide. find_record sí lanza ParseError.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

from warren.core.errors import ParseError


_SEPARATOR = re.compile(r" +|\t")


@dataclass(frozen=True)
class GrantRecord:
    """Permisos observados de un usuario en un vhost ('' = sin permiso)"""
    configure: str
    write: str
    read: str

    def as_dict(self) -> Dict[str, str]:
        return {"configure": self.configure, "write": self.write, "read": self.read}


@dataclass(frozen=True)
class ParsedRecord:
    """Línea que coincide con la clave buscada"""
    key: str
    values: Dict[str, str]


@dataclass(frozen=True)
class NoMatch:
    """Línea válida de otra clave"""
    key: str


@dataclass(frozen=True)
class ParseFailure:
    """Línea con un número de columnas distinto del esperado"""
    line: str
    message: str


ParseResult = Union[ParsedRecord, NoMatch, ParseFailure]


def split_columns(line: str) -> List[str]:
    """Divide una línea en columnas conservando columnas vacías entre tabuladores."""
    return _SEPARATOR.split(line.strip(" \r\n"))


def parse_line(line: str, expected_key: str, fields: Sequence[str], kind: str) -> ParseResult:
    """
    Convierte una línea en un registro de aridad fija.

    Args:
        line: Línea cruda del listado
        expected_key: Valor de la primera columna que se busca
        fields: Nombres de las k columnas restantes, en orden
        kind: Recurso listado (para el mensaje: list_<kind>)

    Returns:
        ParsedRecord si la clave coincide, NoMatch si es de otra clave,
        ParseFailure si la línea no tiene exactamente 1 + k columnas
    """
    columns = split_columns(line)
    if len(columns) != len(fields) + 1:
        return ParseFailure(line=line, message=f"cannot parse line from list_{kind}: {line!r}")

    key, rest = columns[0], columns[1:]
    if key != expected_key:
        return NoMatch(key=key)
    return ParsedRecord(key=key, values=dict(zip(fields, rest)))


def find_record(
    lines: Sequence[str],
    expected_key: str,
    fields: Sequence[str],
    kind: str
) -> Optional[ParsedRecord]:
    """
    Busca la única línea de expected_key en un listado.

    Returns:
        ParsedRecord o None si ninguna línea coincide (incluye listado vacío)

    Raises:
        ParseError: si alguna línea está mal formada o la clave aparece dos veces
    """
    found: Optional[ParsedRecord] = None
    for line in lines:
        result = parse_line(line, expected_key, fields, kind)
        if isinstance(result, ParseFailure):
            raise ParseError(result.message)
        if isinstance(result, ParsedRecord):
            if found is not None:
                raise ParseError(f"duplicate entry for {expected_key!r} in list_{kind}")
            found = result
    return found


def parse_listing(lines: Sequence[str], fields: Sequence[str], kind: str) -> Dict[str, Dict[str, str]]:
    """
    Parsea un listado completo: clave -> valores.

    Raises:
        ParseError: si alguna línea está mal formada o hay claves repetidas
    """
    records: Dict[str, Dict[str, str]] = {}
    for line in lines:
        columns = split_columns(line)
        if len(columns) != len(fields) + 1:
            raise ParseError(f"cannot parse line from list_{kind}: {line!r}")
        key = columns[0]
        if key in records:
            raise ParseError(f"duplicate entry for {key!r} in list_{kind}")
        records[key] = dict(zip(fields, columns[1:]))
    return records
