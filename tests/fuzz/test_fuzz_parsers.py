import random
import string
import pytest
from cfp.PARSERS.containerfile_parser import ContainerfileParser
from cfp.PARSERS.line_normalizer import LineNormalizer

FRAGMENTS = [
    "FROM", "from", "COPY", "ADD", "RUN", "AS", "as", "--from=", "--from=0",
    "--from=1", "--from=build", "--platform=linux/amd64", "build", "alpine",
    "0", "1", "2", "#", "\\", "`", "# escape=`", "\n", "\r\n", " ", "\t", '"', "'",
]


def random_string(rng, length):
    return ''.join(rng.choice(string.printable) for _ in range(length))


def random_containerfile(rng, length):
    return ''.join(rng.choice(FRAGMENTS) + rng.choice(["", " ", "\n"]) for _ in range(length))


def assert_consistent(result):
    for position, stage in enumerate(result.targets):
        assert stage.index == position
        assert all(dep < stage.index for dep in stage.depends_on)
    for ref in result.unresolved_references:
        assert 0 <= ref.stage_index < len(result.targets)


@pytest.mark.parametrize("seed", range(5))
def test_fuzz_printable_input(seed):
    rng = random.Random(seed)
    parser = ContainerfileParser()
    for _ in range(100):
        content = random_string(rng, rng.randint(0, 1000))
        assert_consistent(parser.parse_from_string(content))


@pytest.mark.parametrize("seed", range(5))
def test_fuzz_containerfile_like_input(seed):
    rng = random.Random(seed)
    parser = ContainerfileParser()
    for _ in range(100):
        content = random_containerfile(rng, rng.randint(0, 200))
        assert_consistent(parser.parse_from_string(content))


def test_logical_lines_are_never_blank():
    rng = random.Random(42)
    for _ in range(200):
        content = random_containerfile(rng, rng.randint(0, 100))
        for line in LineNormalizer(content):
            assert line.text and line.text == line.text.strip()
            assert 1 <= line.start_line <= line.end_line


def test_edge_cases_parsers():
    parser = ContainerfileParser()

    # Empty string
    assert parser.parse_from_string("").targets == []

    # Only whitespace
    assert parser.parse_from_string("   \n\t  ").targets == []

    # Very long line
    parser.parse_from_string("FROM alpine\nRUN " + "a" * 10000)

    # Many line continuations
    result = parser.parse_from_string("FROM alpine\n" + "RUN echo \\\n" * 100 + "hello")
    assert len(result.targets) == 1
    assert len(result.targets[0].instructions) == 1

    # Dangling flags
    parser.parse_from_string("FROM --platform=\nCOPY --from=\nADD --from=''")
