import pytest
import os
from cfp.PARSERS.containerfile_parser import ContainerfileParser
from cfp.READERS.text_file_reader import InputUnavailable


def test_parsing_never_executes_instructions(tmp_path):
    """
    RUN instructions are data: parsing must not run them.
    """
    injected_file = tmp_path / "injected.txt"
    content = (
        "FROM alpine\n"
        f"RUN touch {injected_file}\n"
        f"RUN echo hello; touch {injected_file}\n"
        f"ONBUILD RUN touch {injected_file}\n"
    )
    result = ContainerfileParser().parse_from_string(content)

    assert len(result.targets[0].instructions) == 3
    assert not os.path.exists(injected_file), "Instruction executed during parsing!"


def test_missing_file_parse():
    """
    A missing file is reported as unavailable input, not as a raw OS error.
    """
    parser = ContainerfileParser()
    with pytest.raises(InputUnavailable) as exc_info:
        parser.parse("non_existent_file_12345.txt")
    assert not isinstance(exc_info.value, OSError)
