"""Helpers for reading Space Engineers SBC/RESX XML definition files."""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterator, Optional, Union

from ..errors import SbcStructureError

logger = logging.getLogger("secalc.game_data")

XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
XSI_TYPE = f"{{{XSI_NAMESPACE}}}type"


def read_xml(path: Path) -> ET.Element:
    """
    Parse an XML file and return its root element.

    Raises:
        OSError: If the file can't be read
        ET.ParseError: If the XML is malformed
    """
    # Parse from the file so expat handles the UTF-8 BOM that SE files carry
    parser = ET.XMLParser()
    return ET.parse(str(path), parser=parser).getroot()


def xsi_type(node: ET.Element) -> Optional[str]:
    """Get the xsi:type attribute of an element."""
    return node.get(XSI_TYPE)


def child_elem_opt(node: ET.Element, tag: str) -> Optional[ET.Element]:
    return node.find(tag)


def child_elem(node: ET.Element, tag: str) -> ET.Element:
    child = node.find(tag)
    if child is None:
        raise SbcStructureError(f"Missing element <{tag}>", node.tag)
    return child


def first_child_elem(node: ET.Element) -> ET.Element:
    for child in node:
        return child
    raise SbcStructureError("Expected a child element", node.tag)


def children_elems(node: ET.Element, tag: str) -> Iterator[ET.Element]:
    return iter(node.findall(tag))


def text_or_err(node: ET.Element) -> str:
    if node.text is None or not node.text.strip():
        raise SbcStructureError("Element has no text", node.tag)
    return node.text.strip()


def _parse_float(text: str, where: str) -> float:
    try:
        return float(text)
    except ValueError as e:
        raise SbcStructureError(f"Could not parse '{text}' as a number", where) from e


def _parse_bool(text: str, where: str) -> bool:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise SbcStructureError(f"Could not parse '{text}' as a boolean", where)


def parse_child_str(node: ET.Element, tag: str) -> str:
    return text_or_err(child_elem(node, tag))


def parse_child_str_opt(node: ET.Element, tag: str, default: Optional[str] = None) -> Optional[str]:
    child = child_elem_opt(node, tag)
    if child is None or child.text is None:
        return default
    return child.text.strip()


def parse_child_float(node: ET.Element, tag: str) -> float:
    return _parse_float(parse_child_str(node, tag), tag)


def parse_child_float_opt(node: ET.Element, tag: str, default: float) -> float:
    text = parse_child_str_opt(node, tag)
    if not text:
        return default
    return _parse_float(text, tag)


def parse_child_bool_opt(node: ET.Element, tag: str, default: bool) -> bool:
    text = parse_child_str_opt(node, tag)
    if not text:
        return default
    return _parse_bool(text, tag)


def parse_attribute_float(node: ET.Element, name: str) -> float:
    value: Union[str, None] = node.get(name)
    if value is None:
        raise SbcStructureError(f"Missing attribute '{name}'", node.tag)
    return _parse_float(value, node.tag)


def size_volume(node: ET.Element) -> float:
    """Product of the x, y and z attributes of a <Size> element."""
    return parse_attribute_float(node, "x") * parse_attribute_float(node, "y") * parse_attribute_float(node, "z")
