"""PNG snapshot of the on-screen preview."""

from __future__ import annotations

import io
import logging

from PIL import Image, ImageDraw, ImageFont

import config
from invoicegen.documents.models import Document
from invoicegen.errors import RenderFailure
from invoicegen.render import common
from invoicegen.render.preview import PreviewNode, build_preview

logger = logging.getLogger(__name__)

PAGE_WIDTH = 800        # logical pixels, before scaling
PADDING = 32
BLOCK_GAP = 24
CELL_PADDING = 16
LINE_SPACING = 1.4
SEPARATOR_COLOR = "#e5e7eb"
BORDER_COLOR = "#e5e7eb"
DEFAULT_COLOR = "#111827"


class _Snapshot:
    """Two-pass rasterizer: lay the tree out into draw operations, then paint them."""

    def __init__(self, scale: int):
        self.scale = scale
        self.ops = []
        self._fonts: dict[tuple[int, bool], ImageFont.FreeTypeFont] = {}
        self._measure = ImageDraw.Draw(Image.new("RGB", (1, 1)))

    def px(self, value: float) -> int:
        return int(round(value * self.scale))

    def font(self, size: int, bold: bool = False):
        key = (size, bold)
        if key not in self._fonts:
            self._fonts[key] = ImageFont.truetype(str(common.font_path(bold)), self.px(size))
        return self._fonts[key]

    def line_height(self, size: int) -> int:
        return self.px(size * LINE_SPACING)

    def wrap(self, text: str, font, width: int) -> list[str]:
        lines = []
        for paragraph in text.split("\n"):
            words = paragraph.split(" ")
            current = ""
            for word in words:
                candidate = f"{current} {word}" if current else word
                if current and self._measure.textlength(candidate, font=font) > width:
                    lines.append(current)
                    current = word
                else:
                    current = candidate
            lines.append(current)
        return lines

    # -- Layout --

    def text(self, node: PreviewNode, x: int, y: int, width: int) -> int:
        style = node.style
        size = style.get("size", 14)
        font = self.font(size, bold=style.get("weight") == "bold")
        fill = style.get("color", DEFAULT_COLOR)
        align = style.get("align", "left")
        step = self.line_height(size)

        lines = self.wrap(node.text, font, width)
        for i, line in enumerate(lines):
            line_width = self._measure.textlength(line, font=font)
            if align == "right":
                lx = x + width - line_width
            elif align == "center":
                lx = x + (width - line_width) / 2
            else:
                lx = x
            self.ops.append(_text_op((int(lx), y + i * step), line, font, fill))
        return len(lines) * step

    def logo(self, node: PreviewNode, x: int, y: int, width: int) -> int:
        try:
            img = Image.open(io.BytesIO(node.data))
            img.load()
        except Exception as e:
            raise RenderFailure("image", f"logo image could not be read ({e})") from e
        img = img.convert("RGBA")
        img.thumbnail((self.px(node.style.get("width", 160)), self.px(node.style.get("height", 80))))
        left = x + width - img.width if node.style.get("align") == "right" else x
        self.ops.append(_paste_op(img, (int(left), y)))
        return img.height + self.px(4)

    def separator(self, x: int, y: int, width: int) -> int:
        self.ops.append(_rect_op((x, y + self.px(8), x + width, y + self.px(8) + max(self.scale // 2, 1)),
                                 SEPARATOR_COLOR))
        return self.px(16)

    def stack(self, children: list[PreviewNode], x: int, y: int, width: int, gap: int = 0) -> int:
        height = 0
        for i, child in enumerate(children):
            if i:
                height += gap
            height += self.layout(child, x, y + height, width)
        return height

    def header(self, node: PreviewNode, x: int, y: int, width: int) -> int:
        left, right = node.children
        left_width = int(width * 0.55)
        return max(
            self.layout(left, x, y, left_width - self.px(16)),
            self.layout(right, x + left_width, y, width - left_width),
        )

    def row(self, node: PreviewNode, x: int, y: int, width: int, padding: int) -> int:
        spans = [cell.style.get("span", 12 // len(node.children)) for cell in node.children]
        unit = width / sum(spans)
        heights = []
        cx = x
        # Cells first so the row knows its height before the fill goes underneath
        start = len(self.ops)
        for cell, span in zip(node.children, spans):
            cell_width = int(unit * span)
            heights.append(self.text(cell, cx + padding, y + padding, cell_width - 2 * padding))
            cx += cell_width
        height = max(heights) + 2 * padding
        background = node.style.get("background")
        if background:
            self.ops.insert(start, _rect_op((x, y, x + width, y + height), background))
        return height

    def table(self, node: PreviewNode, x: int, y: int, width: int) -> int:
        height = 0
        for row in node.children:
            height += self.row(row, x, y + height, width, self.px(CELL_PADDING))
        self.ops.append(_outline_op((x, y, x + width, y + height), BORDER_COLOR, max(self.scale // 2, 1)))
        return height

    def totals(self, node: PreviewNode, x: int, y: int, width: int) -> int:
        block_width = min(self.px(node.style.get("width", 256)), width)
        bx = x + width - block_width
        height = 0
        for child in node.children:
            if child.kind == "separator":
                height += self.separator(bx, y + height, block_width)
            else:
                height += self.row(child, bx, y + height, block_width, self.px(4))
        return height

    def layout(self, node: PreviewNode, x: int, y: int, width: int) -> int:
        if node.kind in ("title", "line", "heading", "hint", "cell"):
            return self.text(node, x, y, width) + self.px(4)
        if node.kind == "logo":
            return self.logo(node, x, y, width)
        if node.kind == "separator":
            return self.separator(x, y, width)
        if node.kind == "header":
            return self.header(node, x, y, width)
        if node.kind == "table":
            return self.table(node, x, y, width)
        if node.kind == "totals":
            return self.totals(node, x, y, width)
        if node.kind == "document":
            return self.stack(node.children, x, y, width, gap=self.px(BLOCK_GAP))
        return self.stack(node.children, x, y, width)

    def paint(self, root: PreviewNode) -> Image.Image:
        margin = self.px(PADDING)
        width = self.px(PAGE_WIDTH)
        content_height = self.layout(root, margin, margin, width - 2 * margin)
        img = Image.new("RGB", (width, content_height + 2 * margin), "#ffffff")
        draw = ImageDraw.Draw(img)
        for op in self.ops:
            op(img, draw)
        return img


def _text_op(xy, text, font, fill):
    def op(img, draw):
        draw.text(xy, text, font=font, fill=fill)
    return op


def _rect_op(box, fill):
    def op(img, draw):
        draw.rectangle(box, fill=fill)
    return op


def _outline_op(box, color, line_width):
    def op(img, draw):
        draw.rectangle(box, outline=color, width=line_width)
    return op


def _paste_op(logo, xy):
    def op(img, draw):
        img.paste(logo, xy, logo)
    return op


def render_image(document: Document, scale: int | None = None) -> common.RenderedFile:
    """Rasterize the preview of a document to PNG on a white background."""
    scale = max(scale or config.IMAGE_SCALE, 2)
    filename = common.export_filename(document, "png")

    try:
        snapshot = _Snapshot(scale)
        img = snapshot.paint(build_preview(document))
        buffer = io.BytesIO()
        img.save(buffer, "PNG")
    except RenderFailure as e:
        if e.channel != "image":
            raise RenderFailure("image", str(e)) from e
        raise
    except Exception as e:
        raise RenderFailure("image", str(e)) from e

    logger.info(f"Image rendered: {filename} ({img.width}x{img.height})")
    return common.RenderedFile(filename=filename, content=buffer.getvalue(), media_type="image/png")
