# tests/conftest.py
"""
Shared fixtures: small ``-fcallgraph-info`` dumps and a helper that
writes them to disk.
"""

import pytest

from callgraph_info import CallGraph


# Two mangled C++ functions, one call between them.
FOO_BAR_CI = r'''graph: { title: "a.cpp"
node: { title: "_Z3fooi" label: "foo\n/src/a.c:10:2" }
node: { title: "_Z3bari" label: "bar\n/src/a.c:20:1" }
edge: { sourcename: "_Z3fooi" targetname: "_Z3bari" label: "call" }
}
'''

# What GCC actually writes for a C file with an external callee.
MAIN_C_CI = r'''graph: { title: "main.c"
node: { title: "main" label: "main\nmain.c:3:5\n16 bytes (static)\n0 dynamic objects" }
node: { title: "helper" label: "helper\nmain.c:1:13\n8 bytes (static)\n0 dynamic objects" }
node: { title: "puts" label: "puts" shape : ellipse }
edge: { sourcename: "main" targetname: "helper" label: "main.c:4:3" }
edge: { sourcename: "main" targetname: "helper" label: "main.c:5:3" }
edge: { sourcename: "helper" targetname: "puts" label: "main.c:1:30" }
edge: { sourcename: "main" targetname: "__stack_chk_fail" }
}
'''

# Calls into a function defined in MAIN_C_CI.
UTIL_C_CI = r'''graph: { title: "util.c"
node: { title: "util_init" label: "util_init\nutil.c:2:6" }
edge: { sourcename: "util_init" targetname: "helper" label: "util.c:3:5" }
}
'''


@pytest.fixture
def graph():
    return CallGraph()


@pytest.fixture
def write_dump(tmp_path):
    """Return a function that writes *text* to ``tmp_path/name``."""

    def _write(name: str, text: str):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
