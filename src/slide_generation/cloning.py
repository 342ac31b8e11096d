"""Low-level slide duplication and text replacement on python-pptx objects."""

from __future__ import annotations

import copy
import logging
from typing import Dict, List, Optional, Tuple

from pptx.enum.shapes import MSO_SHAPE_TYPE, PP_PLACEHOLDER
from pptx.opc.constants import RELATIONSHIP_TYPE as RT
from pptx.oxml.ns import qn

logger = logging.getLogger(__name__)

_R_NS_PREFIX = qn("r:id").split("}")[0] + "}"
_SKIPPED_RELS = {RT.SLIDE_LAYOUT, RT.NOTES_SLIDE}
_SKIPPED_TREE_TAGS = {qn("p:nvGrpSpPr"), qn("p:grpSpPr"), qn("p:extLst")}

_TITLE_TYPES = {PP_PLACEHOLDER.TITLE, PP_PLACEHOLDER.CENTER_TITLE, PP_PLACEHOLDER.VERTICAL_TITLE}
_BODY_TYPES = {
    PP_PLACEHOLDER.BODY,
    PP_PLACEHOLDER.OBJECT,
    PP_PLACEHOLDER.SUBTITLE,
    PP_PLACEHOLDER.VERTICAL_BODY,
    PP_PLACEHOLDER.VERTICAL_OBJECT,
}
_SKIPPED_TYPES = {PP_PLACEHOLDER.DATE, PP_PLACEHOLDER.FOOTER, PP_PLACEHOLDER.SLIDE_NUMBER}
_BULLET_PREFIXES = ("- ", "* ", "• ")


def _copy_relationships(source, target) -> Dict[str, str]:
    """Relate ``target`` to every part ``source`` uses; return old -> new rId."""
    rid_map: Dict[str, str] = {}
    for rel in list(source.part.rels.values()):
        if rel.reltype in _SKIPPED_RELS:
            continue
        if rel.is_external:
            new_rid = target.part.relate_to(rel.target_ref, rel.reltype, is_external=True)
        else:
            new_rid = target.part.relate_to(rel.target_part, rel.reltype)
        rid_map[rel.rId] = new_rid
    return rid_map


def _remap_rids(element, rid_map: Dict[str, str]) -> None:
    for node in element.iter():
        for attr, value in list(node.attrib.items()):
            if attr.startswith(_R_NS_PREFIX) and value in rid_map:
                node.set(attr, rid_map[value])


def duplicate_slide(prs, source):
    """Append a copy of ``source`` (shapes, background, media) to ``prs``."""

    target = prs.slides.add_slide(source.slide_layout)
    for shape in list(target.shapes):
        shape._element.getparent().remove(shape._element)

    rid_map = _copy_relationships(source, target)

    target_tree = target.shapes._spTree
    for element in source.shapes._spTree:
        if element.tag in _SKIPPED_TREE_TAGS:
            continue
        clone = copy.deepcopy(element)
        _remap_rids(clone, rid_map)
        target_tree.insert_element_before(clone, "p:extLst")

    source_bg = source._element.cSld.bg
    if source_bg is not None:
        target_csld = target._element.cSld
        if target_csld.bg is not None:
            target_csld.remove(target_csld.bg)
        bg = copy.deepcopy(source_bg)
        _remap_rids(bg, rid_map)
        target_csld.insert(0, bg)
    return target


def remove_slide(prs, slide_id) -> None:
    """Drop the slide whose ``p:sldId`` element is ``slide_id``."""
    sld_id_lst = prs.slides._sldIdLst
    prs.part.drop_rel(slide_id.rId)
    sld_id_lst.remove(slide_id)


def _text_shapes(shapes) -> List:
    found = []
    for shape in shapes:
        if shape.shape_type == MSO_SHAPE_TYPE.GROUP:
            found.extend(_text_shapes(shape.shapes))
            continue
        if not shape.has_text_frame:
            continue
        if shape.is_placeholder and shape.placeholder_format.type in _SKIPPED_TYPES:
            continue
        found.append(shape)
    return found


def find_text_targets(slide) -> Tuple[Optional[object], Optional[object]]:
    """Return the (title, body) shapes whose text gets replaced.

    Placeholders win. Without them the first non-empty text box stands for the
    title and the next one for the body.
    """
    shapes = _text_shapes(slide.shapes)
    title = body = None
    for shape in shapes:
        if not shape.is_placeholder:
            continue
        ph_type = shape.placeholder_format.type
        if title is None and ph_type in _TITLE_TYPES:
            title = shape
        elif body is None and ph_type in _BODY_TYPES:
            body = shape

    free = [s for s in shapes if s is not title and s is not body and s.text_frame.text.strip()]
    if title is None and free:
        title = free.pop(0)
    if body is None and free:
        body = free.pop(0)
    return title, body


def _clean_line(line: str) -> str:
    stripped = line.strip()
    for prefix in _BULLET_PREFIXES:
        if stripped.startswith(prefix):
            return stripped[len(prefix):].strip()
    return stripped


def replace_text(text_frame, text: str) -> None:
    """Replace all text in ``text_frame``, keeping the first run's formatting."""

    lines = [_clean_line(line) for line in text.splitlines() if line.strip()] or [""]
    paragraphs = text_frame.paragraphs
    first = paragraphs[0]
    p_pr = copy.deepcopy(first._p.pPr) if first._p.pPr is not None else None
    r_pr = None
    if first.runs and first.runs[0]._r.rPr is not None:
        r_pr = copy.deepcopy(first.runs[0]._r.rPr)

    for extra in paragraphs[1:]:
        extra._p.getparent().remove(extra._p)
    first.clear()

    def _write(paragraph, line: str) -> None:
        run = paragraph.add_run()
        run.text = line
        if r_pr is not None:
            run._r.insert(0, copy.deepcopy(r_pr))

    _write(first, lines[0])
    for line in lines[1:]:
        paragraph = text_frame.add_paragraph()
        if p_pr is not None:
            paragraph._p.insert(0, copy.deepcopy(p_pr))
        _write(paragraph, line)


__all__ = ["duplicate_slide", "find_text_targets", "remove_slide", "replace_text"]
