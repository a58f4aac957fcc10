import pytest

from expo_updates_setup.errors import ParseError
from expo_updates_setup.pbxproj import PbxArray, PbxDict, parse_pbxproj

TEXT = """// !$*UTF8*$!
{
	archiveVersion = 1;
	objects = {
		AAA /* Build */ = {
			isa = PBXShellScriptBuildPhase;
			files = (
				BBB /* a.m in Sources */,
				CCC,
			);
			name = "Bundle \\"quoted\\" code";
			shellScript = "echo hi\\n";
		};
		"DDD" = {isa = PBXBuildFile; fileRef = EEE /* b.m */; };
	};
	rootObject = AAA /* Project object */;
}
"""


def test_parse_keeps_raw_quoting_and_structure() -> None:
    doc = parse_pbxproj(TEXT)

    phase = doc.objects.get("AAA")
    assert isinstance(phase, PbxDict)
    assert phase.get_raw("isa") == "PBXShellScriptBuildPhase"
    assert phase.get_raw("name") == '"Bundle \\"quoted\\" code"'
    files = phase.get("files")
    assert isinstance(files, PbxArray)
    assert [item.raw for item in files.items] == ["BBB", "CCC"]
    assert doc.objects.get("DDD").get_raw("fileRef") == "EEE"


def test_serialize_untouched_document_is_identical() -> None:
    assert parse_pbxproj(TEXT).serialize() == TEXT


def test_serialize_only_replaces_edited_scalar() -> None:
    doc = parse_pbxproj(TEXT)
    doc.objects.get("AAA").set_raw("shellScript", '"echo bye\\n"')

    out = doc.serialize()
    assert out == TEXT.replace('"echo hi\\n"', '"echo bye\\n"')


def test_find_objects_in_file_order() -> None:
    doc = parse_pbxproj(TEXT)
    found = list(doc.find_objects(lambda obj: obj.get_raw("isa") is not None))
    assert [obj.get_raw("isa") for obj in found] == ["PBXShellScriptBuildPhase", "PBXBuildFile"]


def test_set_raw_rejects_unknown_key() -> None:
    doc = parse_pbxproj(TEXT)
    with pytest.raises(KeyError):
        doc.objects.get("AAA").set_raw("missing", "x")


@pytest.mark.parametrize(
    "text",
    [
        "{ objects = { A = { isa = X; }; }",
        '{ objects = { A = { name = "unterminated; }; }; }',
        "{ objects = { A = B C; }; }",
        "{ objects = {}; } trailing",
        "/* never closed",
        "",
    ],
)
def test_malformed_input_raises_parse_error(text: str) -> None:
    with pytest.raises(ParseError):
        parse_pbxproj(text)


def test_missing_objects_dictionary_raises_parse_error() -> None:
    doc = parse_pbxproj("{ archiveVersion = 1; }")
    with pytest.raises(ParseError):
        _ = doc.objects
