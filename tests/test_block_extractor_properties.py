"""
Property-based tests for the streaming fenced-block extractor.
"""

import allure
from hypothesis import given, settings, strategies as st

from cody_cli.block_extractor import (
    SCAN_WINDOW,
    BlockExtractor,
    ExtractorMode,
    FileArtifact,
)

from fakes import split_at

HELLO_REPLY = 'Sure!\n```python:hello.py\nprint("hi")\n```\nDone.'

MULTI_BLOCK_REPLY = (
    "Here is the project.\n\n"
    "```python:src/app.py\n"
    "import os\n"
    "\n"
    "def main():\n"
    "    print(os.getcwd())\n"
    "```\n"
    "And a config file:\n"
    "```json:config/settings.json\n"
    "{\"debug\": true}\n"
    "```\n"
    "Inline `code` and ``double`` ticks are fine.\n"
    "```typescript:web/index.ts\n"
    "export const x = 1;\n"
    "```"
)


def extract(chunks: list[str]) -> list[tuple[str, str]]:
    extractor = BlockExtractor()
    artifacts: list[FileArtifact] = []
    for chunk in chunks:
        artifacts.extend(extractor.feed(chunk))
    artifacts.extend(extractor.finish())
    return [(a.filename, a.content) for a in artifacts]


@st.composite
def code_line_strategy(draw):
    """A line of code that never contains a fence."""
    line = draw(st.text(
        alphabet=st.characters(blacklist_characters="`\n", blacklist_categories=("Cs",)),
        max_size=30,
    ))
    return line


@st.composite
def fenced_reply_strategy(draw):
    """A reply with prose and one to three fenced file blocks."""
    parts = []
    expected = []
    for index in range(draw(st.integers(min_value=1, max_value=3))):
        prose = draw(st.lists(code_line_strategy(), max_size=3))
        lines = draw(st.lists(code_line_strategy(), min_size=1, max_size=5))
        lang = draw(st.sampled_from(["python", "js", "ts", "go", "sh"]))
        filename = f"dir{index}/file_{index}.{lang}"
        parts.append("\n".join(prose) + "\n")
        parts.append(f"```{lang}:{filename}\n" + "\n".join(lines) + "\n```\n")
        expected.append((filename, "\n".join(lines).strip()))
    return "".join(parts), expected


@allure.feature("Block Extractor")
@allure.story("Fence-boundary invariance")
@allure.severity(allure.severity_level.CRITICAL)
@settings(max_examples=100)
@given(
    reply=fenced_reply_strategy(),
    offsets=st.lists(st.integers(min_value=0, max_value=600), min_size=1, max_size=15),
)
def test_fence_boundary_invariance(reply, offsets: list[int]):
    """Splitting a reply anywhere yields the same artifacts as one whole chunk."""
    text, expected = reply

    whole = extract([text])
    split = extract(split_at(text, offsets))

    assert split == whole
    assert [name for name, _ in whole] == [name for name, _ in expected]


@allure.feature("Block Extractor")
@allure.story("Every single split point of a multi-block reply")
@allure.severity(allure.severity_level.CRITICAL)
def test_every_two_way_split():
    whole = extract([MULTI_BLOCK_REPLY])
    assert whole == [
        ("src/app.py", "import os\n\ndef main():\n    print(os.getcwd())"),
        ("config/settings.json", "{\"debug\": true}"),
        ("web/index.ts", "export const x = 1;"),
    ]
    for offset in range(1, len(MULTI_BLOCK_REPLY)):
        assert extract(split_at(MULTI_BLOCK_REPLY, [offset])) == whole, f"split at {offset}"


@allure.feature("Block Extractor")
@allure.story("Character-by-character delivery")
def test_one_character_per_chunk():
    assert extract(list(MULTI_BLOCK_REPLY)) == extract([MULTI_BLOCK_REPLY])


@allure.feature("Block Extractor")
@allure.story("Concrete hello.py scenario")
@settings(max_examples=100)
@given(
    first=st.integers(min_value=1, max_value=len(HELLO_REPLY) - 2),
    second=st.integers(min_value=1, max_value=len(HELLO_REPLY) - 1),
)
def test_hello_reply_in_three_chunks(first: int, second: int):
    chunks = split_at(HELLO_REPLY, [first, second])
    assert extract(chunks) == [("hello.py", 'print("hi")')]


@allure.feature("Block Extractor")
@allure.story("Unterminated block is flushed at the end")
@settings(max_examples=50)
@given(offsets=st.lists(st.integers(min_value=0, max_value=60), max_size=6))
def test_unterminated_block(offsets: list[int]):
    text = "Start\n```python:partial.py\nline one\nline two"
    assert extract(split_at(text, offsets)) == [("partial.py", "line one\nline two")]


@allure.feature("Block Extractor")
@allure.story("Empty unterminated block is skipped")
def test_empty_unterminated_block():
    assert extract(["```python:empty.py\n   \n"]) == []


@allure.feature("Block Extractor")
@allure.story("Text after a closing fence is re-fed")
def test_back_to_back_blocks_in_one_chunk():
    text = "```a:one.txt\n1\n``````b:two.txt\n2\n```"
    assert extract([text]) == [("one.txt", "1"), ("two.txt", "2")]


@allure.feature("Block Extractor")
@allure.story("Plain code fences are not files")
def test_fence_without_path_is_ignored():
    assert extract(["```python\nprint(1)\n```\n"]) == []


@allure.feature("Block Extractor")
@allure.story("Opening fence after a long prefix")
def test_long_prefix_before_fence():
    prose = ("word " * 30 + "\n") * 40
    text = prose + "```python:late.py\nx = 1\n```"
    assert len(prose) > SCAN_WINDOW * 10
    assert extract([text]) == [("late.py", "x = 1")]
    assert extract(split_at(text, range(0, len(text), 7))) == [("late.py", "x = 1")]


@allure.feature("Block Extractor")
@allure.story("Scan window stays bounded")
@settings(max_examples=50)
@given(text=st.text(alphabet=st.characters(blacklist_characters="`"), max_size=2000))
def test_scan_window_bounded(text: str):
    extractor = BlockExtractor()
    for piece in split_at(text, range(0, len(text), 37)):
        extractor.feed(piece)
        assert len(extractor.window) <= SCAN_WINDOW
    assert extractor.mode is ExtractorMode.SCANNING


@allure.feature("Block Extractor")
@allure.story("Block-open notification")
def test_on_block_open_called_with_filename():
    opened = []
    extractor = BlockExtractor(on_block_open=opened.append)
    for piece in split_at(HELLO_REPLY, [9, 14, 20]):
        extractor.feed(piece)
    assert opened == ["hello.py"]
    assert extractor.mode is ExtractorMode.SCANNING


@allure.feature("Block Extractor")
@allure.story("is_new reflects the working directory")
def test_is_new_checks_working_dir(tmp_path):
    (tmp_path / "exists.py").write_text("old")
    extractor = BlockExtractor(working_dir=tmp_path)
    artifacts = extractor.feed("```python:exists.py\nnew\n```\n```python:fresh.py\nx\n```")

    assert [(a.filename, a.is_new) for a in artifacts] == [("exists.py", False), ("fresh.py", True)]
    assert artifacts[0].resolve(tmp_path) == (tmp_path / "exists.py").resolve()


@allure.feature("Block Extractor")
@allure.story("Home-style paths for unknown users stay literal")
def test_unknown_user_home_path(tmp_path):
    extractor = BlockExtractor(working_dir=tmp_path)
    artifacts = extractor.feed("```sh:~nosuchuser_zz/setup.sh\necho hi\n```\n")

    assert [(a.filename, a.content, a.is_new) for a in artifacts] == [
        ("~nosuchuser_zz/setup.sh", "echo hi", True)
    ]
    assert artifacts[0].resolve(tmp_path) == (tmp_path / "~nosuchuser_zz" / "setup.sh").resolve()


@allure.feature("Block Extractor")
@allure.story("Unusable filenames still produce an artifact")
def test_nul_in_filename_is_new(tmp_path):
    extractor = BlockExtractor(working_dir=tmp_path)
    artifacts = extractor.feed("```python:bad\x00name.py\nx = 1\n```\n")

    assert [(a.filename, a.is_new) for a in artifacts] == [("bad\x00name.py", True)]


@allure.feature("Block Extractor")
@allure.story("Reset discards a partial block")
def test_reset_discards_partial_block():
    extractor = BlockExtractor()
    extractor.feed("```python:gone.py\nhalf")
    assert extractor.mode is ExtractorMode.CAPTURING
    assert extractor.current_filename == "gone.py"

    extractor.reset()
    assert extractor.finish() == []
