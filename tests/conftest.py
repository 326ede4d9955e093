import pytest

from shellstream.tools import clear_tool_cache


@pytest.fixture(autouse=True)
def fresh_tool_cache():
    clear_tool_cache()
    yield
    clear_tool_cache()

@pytest.fixture
def foo_file(tmp_path):
    path = tmp_path / "foo.txt"
    path.write_text("123\n456\nABC\n")
    return str(path)

@pytest.fixture
def tree(tmp_path):
    """
    root/
        a.txt
        sub/
            b.py
            deeper/
                c.txt
        z.py
    """
    root = tmp_path / "root"
    (root / "sub" / "deeper").mkdir(parents=True)
    (root / "a.txt").write_text("a\n")
    (root / "sub" / "b.py").write_text("b\n")
    (root / "sub" / "deeper" / "c.txt").write_text("c\n")
    (root / "z.py").write_text("z\n")
    return str(root)
