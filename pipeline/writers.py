"""
Output writers for converted documents.

Each writer turns the ordered page texts into one file:
    txt   pages stripped and joined by the page separator
    json  [{"page": 1, "content": "..."}, ...]
    docx  one paragraph per page, a page break between pages
"""

import io
import json
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Type, Union

from docx import Document

from infra.config import DEFAULT_PAGE_SEPARATOR


class OutputWriter(ABC):
    extension: str = ""
    binary: bool = False

    @abstractmethod
    def render(self, texts: List[str], page_separator: str = DEFAULT_PAGE_SEPARATOR) -> Union[str, bytes]:
        pass

    def write(self, texts: List[str], output_path: Path, page_separator: str = DEFAULT_PAGE_SEPARATOR) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        content = self.render(texts, page_separator)
        if self.binary:
            output_path.write_bytes(content)
        else:
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(content)
        return output_path


class TxtWriter(OutputWriter):
    extension = "txt"

    def render(self, texts: List[str], page_separator: str = DEFAULT_PAGE_SEPARATOR) -> str:
        return page_separator.join(text.strip() for text in texts)


class JsonWriter(OutputWriter):
    extension = "json"

    def __init__(self, indent: int = 2):
        self.indent = indent

    def render(self, texts: List[str], page_separator: str = DEFAULT_PAGE_SEPARATOR) -> str:
        pages = [
            {"page": number, "content": text}
            for number, text in enumerate(texts, start=1)
        ]
        return json.dumps(pages, indent=self.indent, ensure_ascii=False)


def clean_paragraph(text: str) -> str:
    """CRLF runs become one newline and a run of one repeated whitespace character collapses to one."""
    text = re.sub(r'(\r\n)+', '\n', text)
    text = re.sub(r'(\s)\1+', r'\1', text)
    return text.strip()


class DocxWriter(OutputWriter):
    """Word document; the page separator does not apply, pages are split by page breaks."""

    extension = "docx"
    binary = True

    def render(self, texts: List[str], page_separator: str = DEFAULT_PAGE_SEPARATOR) -> bytes:
        document = Document()
        for index, text in enumerate(texts):
            document.add_paragraph(clean_paragraph(text))
            if index < len(texts) - 1:
                document.add_page_break()

        buffer = io.BytesIO()
        document.save(buffer)
        return buffer.getvalue()


WRITERS: Dict[str, Type[OutputWriter]] = {
    TxtWriter.extension: TxtWriter,
    JsonWriter.extension: JsonWriter,
    DocxWriter.extension: DocxWriter,
}


def get_writer(output_format: str) -> OutputWriter:
    writer_cls = WRITERS.get(output_format.strip().lower())
    if writer_cls is None:
        raise ValueError(
            f"Unknown output format '{output_format}'. Supported: {', '.join(sorted(WRITERS))}"
        )
    return writer_cls()


def output_paths(base_path: Path, formats: Iterable[str]) -> List[Path]:
    """`base_path` without extension -> one path per format."""
    base_path = Path(base_path)
    return [base_path.with_name(f"{base_path.name}.{fmt}") for fmt in formats]


def write_outputs(
    texts: List[str],
    base_path: Path,
    formats: Iterable[str],
    page_separator: str = DEFAULT_PAGE_SEPARATOR,
) -> List[Path]:
    written = []
    for fmt in formats:
        writer = get_writer(fmt)
        path = Path(base_path).with_name(f"{Path(base_path).name}.{writer.extension}")
        written.append(writer.write(texts, path, page_separator))
    return written
