from __future__ import annotations

import re
import time
from copy import deepcopy
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Dict, Iterable, Optional

from lxml import etree
from pptx import Presentation
from pptx.opc.constants import RELATIONSHIP_TYPE as RT
from pptx.opc.package import Part, XmlPart
from pptx.oxml import parse_xml

from deckmerge.core.errors import AssemblyError

_R_NS = "{http://schemas.openxmlformats.org/officeDocument/2006/relationships}"

# Relationships owned by the destination slide itself, or pointing at other slides.
_SKIPPED_RELTYPES = {RT.SLIDE_LAYOUT, RT.NOTES_SLIDE, RT.SLIDE, RT.COMMENTS}
_HYPERLINK_TAGS = ("hlinkClick", "hlinkHover")


@dataclass
class WriteSummary:
    output_path: Path
    slide_count: int
    duration_ms: int


class SlideAssembler:
    """
    Build one presentation out of a root deck plus slides cloned from other decks.

    The root deck keeps its own slides, masters and layouts. Source decks are
    registered up front and slides are then appended one by one, addressed by the
    number in their part name (``/ppt/slides/slide<N>.xml``).
    """

    def __init__(self) -> None:
        self._root = None
        self._root_path: Optional[Path] = None
        self._sources: Dict[Path, object] = {}
        self._clones: Dict[object, object] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load_root(self, pptx_path: Path) -> None:
        self._root = self._open(pptx_path)
        self._root_path = Path(pptx_path)

    def register_source(self, pptx_path: Path) -> None:
        path = Path(pptx_path)
        if path == self._root_path or path in self._sources:
            return
        self._sources[path] = self._open(path)

    # ------------------------------------------------------------------
    # Slide copying
    # ------------------------------------------------------------------
    def append_slide(self, source_path: Path, slide_number: int) -> None:
        root = self._require_root()
        source = self._sources.get(Path(source_path))
        if source is None:
            raise AssemblyError(f"Source not registered: {Path(source_path).name}")

        slide = self._find_slide(source, slide_number)
        if slide is None:
            raise AssemblyError(f"Slide {slide_number} not found in {Path(source_path).name}")

        new_slide = root.slides.add_slide(self._match_layout(slide.slide_layout.name))

        tree = new_slide.shapes._spTree
        for shape in list(new_slide.shapes):
            tree.remove(shape._element)

        self._clones = {}
        rid_map = self._copy_relationships(slide.part, new_slide.part, slide_part=True)

        for child in slide.shapes._spTree.iterchildren(etree.Element):
            if etree.QName(child).localname in ("nvGrpSpPr", "grpSpPr"):
                continue
            tree.append(deepcopy(child))

        source_bg = slide._element.cSld.bg
        if source_bg is not None:
            target_csld = new_slide._element.cSld
            if target_csld.bg is not None:
                target_csld.remove(target_csld.bg)
            target_csld.insert(0, deepcopy(source_bg))

        dropped = {rId for rId, rel in slide.part.rels.items() if rel.reltype in _SKIPPED_RELTYPES}
        _rewrite_rids(new_slide._element.cSld, rid_map, dropped)
        self._copy_notes(slide, new_slide)

    def _copy_relationships(self, source_part, target_part, slide_part: bool = False) -> Dict[str, str]:
        rid_map: Dict[str, str] = {}
        for rId, rel in source_part.rels.items():
            if slide_part and rel.reltype in _SKIPPED_RELTYPES:
                continue
            if rel.is_external:
                rid_map[rId] = target_part.relate_to(rel.target_ref, rel.reltype, is_external=True)
            elif slide_part and rel.reltype == RT.IMAGE:
                _, new_rid = target_part.get_or_add_image_part(BytesIO(rel.target_part.blob))
                rid_map[rId] = new_rid
            elif rel.target_part in self._clones:
                rid_map[rId] = target_part.relate_to(self._clones[rel.target_part], rel.reltype)
            else:
                clone = self._clone_part(rel.target_part, target_part.package)
                self._clones[rel.target_part] = clone
                rid_map[rId] = target_part.relate_to(clone, rel.reltype)
                self._copy_part_relationships(rel.target_part, clone)
        return rid_map

    def _clone_part(self, part, package):
        partname = package.next_partname(_partname_template(part.partname))
        if part.content_type.endswith("xml"):
            return XmlPart(partname, part.content_type, package=package, element=parse_xml(part.blob))
        return Part(partname, part.content_type, package=package, blob=part.blob)

    def _copy_part_relationships(self, source_part, clone) -> None:
        if not source_part.rels:
            return
        rid_map = self._copy_relationships(source_part, clone)
        if isinstance(clone, XmlPart):
            _rewrite_rids(clone._element, rid_map)

    @staticmethod
    def _copy_notes(slide, new_slide) -> None:
        if not slide.has_notes_slide:
            return
        source_frame = slide.notes_slide.notes_text_frame
        if source_frame is None or not source_frame.text:
            return
        target_frame = new_slide.notes_slide.notes_text_frame
        if target_frame is not None:
            target_frame.text = source_frame.text

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def write(self, output_path: Path) -> WriteSummary:
        root = self._require_root()
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        started = time.perf_counter()
        root.save(str(output_path))
        return WriteSummary(
            output_path=output_path,
            slide_count=len(root.slides),
            duration_ms=int((time.perf_counter() - started) * 1000),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _open(pptx_path: Path):
        try:
            return Presentation(str(pptx_path))
        except Exception as exc:
            raise AssemblyError(f"Cannot open presentation: {Path(pptx_path).name}") from exc

    def _require_root(self):
        if self._root is None:
            raise AssemblyError("No root presentation loaded.")
        return self._root

    @staticmethod
    def _find_slide(presentation, slide_number: int):
        # Walk the relationships instead of ``presentation.slides``, which renumbers slide parts.
        wanted = f"/ppt/slides/slide{slide_number}.xml"
        for rel in presentation.part.rels.values():
            if rel.reltype == RT.SLIDE and rel.target_part.partname == wanted:
                return rel.target_part.slide
        return None

    def _match_layout(self, layout_name: str):
        root = self._require_root()
        layouts = [layout for master in root.slide_masters for layout in master.slide_layouts]
        for layout in layouts:
            if layout.name == layout_name:
                return layout
        for layout in layouts:
            if layout.name.lower() == "blank":
                return layout
        return root.slide_layouts[6] if len(root.slide_layouts) > 6 else root.slide_layouts[0]


def _partname_template(partname: str) -> str:
    partname = str(partname).replace("%", "%%")
    template, count = re.subn(r"\d+(?=\.[^./]+$)", "%d", partname)
    if count:
        return template
    stem, dot, ext = partname.rpartition(".")
    return f"{stem}%d{dot}{ext}" if dot else f"{partname}%d"


def _rewrite_rids(element, rid_map: Dict[str, str], dropped: Iterable[str] = ()) -> None:
    """
    Point copied ``r:`` references at the new relationships.

    References to relationships that were not carried over are removed, along
    with the whole hyperlink element for slide jumps, so they cannot resolve to
    whatever the destination part later stores under the same rId.
    """
    dropped = set(dropped)
    orphans = []
    for node in element.iter(etree.Element):
        for key, value in list(node.attrib.items()):
            if not key.startswith(_R_NS):
                continue
            if value in rid_map:
                node.set(key, rid_map[value])
            elif value in dropped:
                if etree.QName(node).localname in _HYPERLINK_TAGS:
                    orphans.append(node)
                else:
                    del node.attrib[key]
    for node in orphans:
        node.getparent().remove(node)


__all__ = ["SlideAssembler", "WriteSummary"]
