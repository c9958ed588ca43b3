import json

import docx
import pytest

from pipeline.writers import DocxWriter, JsonWriter, TxtWriter, clean_paragraph, get_writer, output_paths, write_outputs


class TestTxtWriter:
    def test_join_with_separator(self):
        assert TxtWriter().render(["  one \n", "two"], page_separator="\n--\n") == "one\n--\ntwo"

    def test_empty_document(self):
        assert TxtWriter().render([]) == ""


class TestJsonWriter:
    def test_pages_numbered_from_one(self):
        data = json.loads(JsonWriter().render(["a", "b"]))
        assert data == [{"page": 1, "content": "a"}, {"page": 2, "content": "b"}]

    def test_non_ascii_kept(self):
        assert "Größe" in JsonWriter().render(["Größe"])


class TestDocxWriter:
    def test_one_paragraph_per_page(self, tmp_path):
        path = DocxWriter().write(["first page", "  second\r\n\r\npage  "], tmp_path / "report.docx")

        texts = [p.text for p in docx.Document(str(path)).paragraphs if p.text.strip()]
        assert texts == ["first page", "second\npage"]

    def test_page_breaks_between_pages_only(self, tmp_path):
        path = DocxWriter().write(["a", "b", "c"], tmp_path / "report.docx")

        body = docx.Document(str(path)).element.body.xml
        assert body.count('w:type="page"') == 2

    def test_non_ascii_kept(self, tmp_path):
        path = DocxWriter().write(["مرحبا بالعالم"], tmp_path / "arabic.docx")
        assert docx.Document(str(path)).paragraphs[0].text == "مرحبا بالعالم"

    def test_empty_document(self, tmp_path):
        path = DocxWriter().write([], tmp_path / "empty.docx")
        assert [p.text for p in docx.Document(str(path)).paragraphs if p.text.strip()] == []


class TestCleanParagraph:
    def test_crlf_runs_become_one_newline(self):
        assert clean_paragraph("a\r\n\r\n\r\nb") == "a\nb"

    def test_repeated_whitespace_collapsed(self):
        assert clean_paragraph("a    b\t\tc\n\n\nd") == "a b\tc\nd"

    def test_mixed_whitespace_kept(self):
        assert clean_paragraph("a \nb") == "a \nb"

    def test_stripped(self):
        assert clean_paragraph("  \n text \n ") == "text"


class TestGetWriter:
    def test_known(self):
        assert isinstance(get_writer("TXT"), TxtWriter)
        assert isinstance(get_writer("json"), JsonWriter)
        assert isinstance(get_writer("docx"), DocxWriter)

    def test_unknown(self):
        with pytest.raises(ValueError):
            get_writer("pdf")


class TestWriteOutputs:
    def test_writes_each_format(self, tmp_path):
        written = write_outputs(["p1", "p2"], tmp_path / "out" / "report", ["txt", "json", "docx"], page_separator="|")

        assert written == [
            tmp_path / "out" / "report.txt",
            tmp_path / "out" / "report.json",
            tmp_path / "out" / "report.docx",
        ]
        assert (tmp_path / "out" / "report.txt").read_text(encoding="utf-8") == "p1|p2"
        assert json.loads((tmp_path / "out" / "report.json").read_text(encoding="utf-8"))[1]["content"] == "p2"
        assert [p.text for p in docx.Document(str(tmp_path / "out" / "report.docx")).paragraphs if p.text.strip()] == ["p1", "p2"]

    def test_dotted_stem_kept(self, tmp_path):
        assert output_paths(tmp_path / "v1.2 scan", ["txt"]) == [tmp_path / "v1.2 scan.txt"]
