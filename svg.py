import logging
import re
from lxml import etree

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

TRANSLATE_RE = re.compile(r"^\s*translate\(\s*([^,\s]+)\s*[,\s]\s*([^)]+)\s*\)\s*$")
LENGTH_RE = re.compile(r"^\s*(\d+(?:\.\d+)?|\.\d+)\s*(px)?\s*$")

# Root attributes that describe the standalone document, not the shape.
DROPPED_ROOT_ATTRS = ("width", "height", "x", "y", "version", "id")
EDITOR_PREFIXES = ("-inkscape", "-sodipodi")


def parse_svg(contents: bytes, name: str) -> etree._Element:
    """Parse one icon. Raises ValueError on anything that is not an <svg> document."""
    parser = etree.XMLParser(remove_blank_text=True, resolve_entities=False)
    try:
        root = etree.fromstring(contents, parser)
    except etree.XMLSyntaxError as e:
        raise ValueError(f"{name}: invalid SVG ({e})") from e
    if etree.QName(root).localname != "svg":
        raise ValueError(f"{name}: root element is <{etree.QName(root).localname}>, not <svg>")

    # Hand-written icons often omit xmlns; treat bare elements as SVG.
    if etree.QName(root).namespace is None:
        for elem in root.iter(tag=etree.Element):
            if etree.QName(elem).namespace is None:
                elem.tag = f"{{{SVG_NS}}}{elem.tag}"
    return root


def cleanup_svg(root: etree._Element, name: str) -> etree._Element:
    # Strip out all comments and processing instructions
    etree.strip_elements(root, etree.Comment, etree.PI, with_tail=False)

    # Remove all elements and attributes with non-svg namespaces
    for elem in root.xpath(".//*"):  # type: ignore
        qname = etree.QName(elem)
        if qname.namespace != SVG_NS or qname.localname == "metadata":
            parent = elem.getparent()
            if parent is not None:
                parent.remove(elem)
            continue

        _strip_editor_attributes(elem)
    _strip_editor_attributes(root)

    # Handle viewBox and root size (width/height)
    width = root.get("width")
    height = root.get("height")
    viewBox = root.get("viewBox")

    if not viewBox:
        if width and height:
            w, h = LENGTH_RE.match(width), LENGTH_RE.match(height)
            if w and h:
                root.set("viewBox", f"0 0 {_number(w.group(1))} {_number(h.group(1))}")
            else:
                logging.warning(f"{name}: Could not parse width/height ({width}, {height})")
        else:
            logging.warning(f"{name}: Neither viewBox nor size attributes found")

    # Absorb translate transforms into the viewBox origin.
    # Editor output often wraps everything in <g transform="translate(tx, ty)">.
    vb = root.get("viewBox")
    if vb:
        children = [c for c in root if isinstance(c.tag, str)]
        if len(children) == 1 and etree.QName(children[0]).localname == "g":
            g = children[0]
            m = TRANSLATE_RE.match(g.get("transform", ""))
            parts = vb.replace(",", " ").split()
            if m and len(parts) == 4:
                try:
                    tx, ty = float(m.group(1)), float(m.group(2))
                    min_x, min_y, vw, vh = (float(p) for p in parts)
                except ValueError:
                    pass
                else:
                    root.set(
                        "viewBox",
                        " ".join(_number(str(v)) for v in (min_x - tx, min_y - ty, vw, vh)),
                    )
                    del g.attrib["transform"]

    etree.cleanup_namespaces(root)
    return root


def _strip_editor_attributes(elem: etree._Element):
    for attr_name in list(elem.attrib.keys()):
        # Remove namespaced attributes (xlink:href is still needed by <use>)
        # and editor prefixed attributes
        if "}" in attr_name and not attr_name.startswith(f"{{{XLINK_NS}}}"):
            del elem.attrib[attr_name]
        elif attr_name.startswith(EDITOR_PREFIXES):
            del elem.attrib[attr_name]

    # Clean up editor CSS properties from style attribute
    if "style" in elem.attrib:
        style_parts = [
            part.strip()
            for part in elem.attrib["style"].split(";")
            if part.strip() and not part.strip().startswith(EDITOR_PREFIXES)
        ]
        if style_parts:
            elem.attrib["style"] = "; ".join(style_parts)
        else:
            del elem.attrib["style"]


def _number(value: str) -> str:
    f = float(value)
    return str(int(f)) if f.is_integer() else str(f)


def to_symbol(
    root: etree._Element, symbol_id: str, sprite: etree._Element
) -> etree._Element:
    """Move the children of an <svg> root into a new <symbol> appended to `sprite`."""
    symbol = etree.SubElement(sprite, f"{{{SVG_NS}}}symbol")
    symbol.set("id", symbol_id)
    for key, value in root.attrib.items():
        if "}" in key or key in DROPPED_ROOT_ATTRS:
            continue
        symbol.set(key, value)
    for child in list(root):
        symbol.append(child)
    return symbol
