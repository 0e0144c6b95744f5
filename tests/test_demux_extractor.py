"""Tests for JSON object extraction."""

from hookrelay.demux import extract_json_objects


class TestExtractJsonObjects:
    """Tests for extract_json_objects."""

    def test_single_object(self):
        objects, remainder = extract_json_objects('{"content":"hi"}')
        assert objects == ['{"content":"hi"}']
        assert remainder == ""

    def test_concatenated_objects_in_order(self):
        buffer = '{"type":"begin"}{"content":"A"}\n{"type":"end"}'
        objects, remainder = extract_json_objects(buffer)
        assert objects == ['{"type":"begin"}', '{"content":"A"}', '{"type":"end"}']
        assert remainder == ""

    def test_nested_objects_extract_as_one(self):
        buffer = '{"content":"x","metadata":{"node":{"id":1}}}'
        objects, remainder = extract_json_objects(buffer)
        assert objects == [buffer]
        assert remainder == ""

    def test_escaped_quote_and_brace_inside_string(self):
        obj = r'{"content":"a \"quoted {brace}\" value"}'
        objects, remainder = extract_json_objects(obj + '{"content":"next"}')
        assert objects == [obj, '{"content":"next"}']
        assert remainder == ""

    def test_escaped_backslash_before_closing_quote(self):
        obj = r'{"content":"path C:\\"}'
        objects, remainder = extract_json_objects(obj)
        assert objects == [obj]
        assert remainder == ""

    def test_unbalanced_brace_inside_string_is_ignored(self):
        obj = '{"content":"}}}{"}'
        objects, _ = extract_json_objects(obj)
        assert objects == [obj]

    def test_incomplete_object_stays_in_remainder(self):
        objects, remainder = extract_json_objects('{"content":"A"}{"content":"B')
        assert objects == ['{"content":"A"}']
        assert remainder == '{"content":"B'

    def test_incomplete_object_keeps_preceding_text(self):
        objects, remainder = extract_json_objects('\n{"content":"par')
        assert objects == []
        assert remainder == '\n{"content":"par'

    def test_text_without_brace_is_all_remainder(self):
        objects, remainder = extract_json_objects("hello world")
        assert objects == []
        assert remainder == "hello world"

    def test_text_before_an_object_is_discarded(self):
        objects, remainder = extract_json_objects('noise {"content":"A"} tail')
        assert objects == ['{"content":"A"}']
        assert remainder == " tail"

    def test_empty_buffer(self):
        assert extract_json_objects("") == ([], "")
