from typing import Dict, Optional
from xml.dom.minidom import Node, Document, Element


def owner_doc(xnode: Node) -> Document:
    if isinstance(xnode, Document):
        return xnode
    else:
        assert xnode.ownerDocument
        return xnode.ownerDocument


def append_text(xparent: Node, value: str) -> Node:
    xtext = owner_doc(xparent).createTextNode(value)
    xparent.appendChild(xtext)
    return xtext


def append_element(xparent: Node, name: str) -> Element:
    xelement = owner_doc(xparent).createElement(name)
    xparent.appendChild(xelement)
    return xelement


def append_text_element(
    xparent: Node, name: str, value: str, attributes: Optional[Dict[str, str]] = None
) -> Element:
    xelement = append_element(xparent, name)
    for key, attribute in (attributes or {}).items():
        xelement.setAttribute(key, attribute)
    append_text(xelement, value)
    return xelement


def element_text(xelement: Element) -> str:
    return "".join(
        child.data for child in xelement.childNodes if child.nodeType == Node.TEXT_NODE
    )


def xml_bytes(xdoc: Document, standalone: Optional[bool] = None) -> bytes:
    return xdoc.toprettyxml(indent="    ", newl="\n", encoding="utf-8", standalone=standalone)


def element_indent(xelement: Node) -> str:
    xprevious = xelement.previousSibling
    if xprevious is not None and xprevious.nodeType == Node.TEXT_NODE and "\n" in xprevious.data:
        return xprevious.data.rsplit("\n", 1)[1]
    return ""


# Append an element on a line of its own in a document that keeps its
# whitespace, the parent's closing tag stays on its own line
def append_indented(xparent: Element, name: str, indent: str, parent_indent: str) -> Element:
    xdoc = owner_doc(xparent)
    xtail = xparent.lastChild
    if xtail is None or xtail.nodeType != Node.TEXT_NODE or xtail.data.strip():
        xtail = xparent.appendChild(xdoc.createTextNode("\n" + parent_indent))
    xparent.insertBefore(xdoc.createTextNode("\n" + indent), xtail)
    xelement = xdoc.createElement(name)
    xparent.insertBefore(xelement, xtail)
    return xelement


# Serialize a parsed document as is, its whitespace is not re-indented
def document_bytes(xdoc: Document) -> bytes:
    declaration, _, body = xdoc.toxml(encoding="utf-8").partition(b"?>")
    return declaration + b"?>\n" + body + b"\n"
