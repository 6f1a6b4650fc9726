from routedoc.generator.validator import validate_files, validate_json, validate_markdown


class TestValidateJson:
    def test_valid_collection(self):
        errors = validate_json({"collection.json": '{"info": {}, "item": []}'})
        assert errors == {}

    def test_syntax_error(self):
        errors = validate_json({"collection.json": '{"info": '})
        assert "collection.json" in errors
        assert "JSONDecodeError" in errors["collection.json"]

    def test_not_a_collection(self):
        errors = validate_json({"collection.json": "[1, 2]"})
        assert "collection.json" in errors

    def test_skips_non_json(self):
        errors = validate_json({"index.md": "{", "collection.json": '{"info": {}, "item": []}'})
        assert errors == {}


class TestValidateMarkdown:
    def test_valid_page(self):
        errors = validate_markdown({"index.md": "# Title\n\n```bash\ncurl x\n```\n"})
        assert errors == {}

    def test_empty_page(self):
        errors = validate_markdown({"groups/0-a.md": "  \n"})
        assert errors == {"groups/0-a.md": "Empty page"}

    def test_unclosed_fence(self):
        errors = validate_markdown({"index.md": "# Title\n```json\n{}\n"})
        assert "index.md" in errors

    def test_skips_non_markdown(self):
        errors = validate_markdown({"collection.json": ""})
        assert errors == {}


class TestValidateFiles:
    def test_all_valid(self):
        files = {
            "index.md": "# Docs\n",
            "collection.json": '{"info": {}, "item": []}',
        }
        assert validate_files(files) == {}

    def test_errors_from_both(self):
        files = {
            "index.md": "",
            "collection.json": "nope",
        }
        errors = validate_files(files)
        assert set(errors) == {"index.md", "collection.json"}
