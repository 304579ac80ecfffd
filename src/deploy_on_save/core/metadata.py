import base64
import xml.etree.ElementTree as ET
from typing import Any

_ATTRIBUTES_KEY = "$"


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _element_to_value(element: ET.Element) -> Any:
    children = list(element)
    attributes = dict(element.attrib)
    if not children and not attributes:
        return (element.text or "").strip()

    value: dict[str, Any] = {}
    if attributes:
        value[_ATTRIBUTES_KEY] = attributes
    for child in children:
        name = _local_name(child.tag)
        child_value = _element_to_value(child)
        if name not in value:
            value[name] = child_value
        elif isinstance(value[name], list):
            value[name].append(child_value)
        else:
            value[name] = [value[name], child_value]
    return value


def parse_xml_strict(text: str) -> dict[str, Any]:
    """Parse an XML document into the content of its root element.

    Namespaces are dropped from tag names, attributes are kept under ``"$"``
    and repeated children become lists. Raises ``ET.ParseError`` on malformed
    input.
    """
    root = ET.fromstring(text)
    value = _element_to_value(root)
    return value if isinstance(value, dict) else {}


def _append_value(parent: ET.Element, name: str, value: Any) -> None:
    if isinstance(value, list):
        for item in value:
            _append_value(parent, name, item)
        return
    element = ET.SubElement(parent, name)
    if isinstance(value, dict):
        for key, child in value.items():
            if key == _ATTRIBUTES_KEY:
                element.attrib.update({str(k): str(v) for k, v in child.items()})
            else:
                _append_value(element, key, child)
    elif value is not None:
        element.text = str(value).lower() if isinstance(value, bool) else str(value)


def build_xml(obj: dict[str, Any], headless: bool = False) -> str:
    """Serialize a single-rooted dict produced by ``parse_xml_strict`` back to XML."""
    if len(obj) != 1:
        raise ValueError("XML object must have exactly one root element")
    container = ET.Element("root")
    for name, value in obj.items():
        _append_value(container, name, value)
    root = container[0]
    ET.indent(root)
    body = ET.tostring(root, encoding="unicode")
    if headless:
        return body
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + body


def to_array(value: Any, key: str) -> dict[str, list[Any]]:
    """Normalize a ``<targets><target>..</target></targets>`` style value to ``{key: [...]}``."""
    if not value or not isinstance(value, dict):
        return {key: []}
    items = value.get(key)
    if items is None:
        return {key: []}
    return {key: items if isinstance(items, list) else [items]}


def encode_base64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def prepare_bundle_metadata(text: str) -> dict[str, Any]:
    """Build the ``LightningComponentBundle`` metadata payload from a ``js-meta.xml`` document."""
    metadata = parse_xml_strict(text)
    metadata.pop(_ATTRIBUTES_KEY, None)
    target_configs = metadata.get("targetConfigs")
    serialized = build_xml({"targetConfigs": target_configs}, headless=True) if target_configs else ""
    metadata["targets"] = to_array(metadata.get("targets"), "target")
    metadata["targetConfigs"] = encode_base64(serialized)
    return metadata
