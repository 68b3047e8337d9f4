"""Root test configuration: isolated environment and a shared literate document"""

import os

import pytest


SAMPLE_DOC = """\
---
title: Demo
header-args:
  mkdirp: yes
---
# Demo

```python :tangle app/main.py :name imports
import os
```

Some prose between blocks.

```python :tangle app/main.py :name helper
def helper():
    return os.getcwd()
```

```sh :tangle setup.sh
echo hi
```

```python :tangle app/main.py :name entry
print(helper())
```

```python
# scratch, not tangled
```
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop MDCTX_* variables so tests never see the caller's configuration."""
    for name in list(os.environ):
        if name.startswith("MDCTX_"):
            monkeypatch.delenv(name)


@pytest.fixture(name="doc_path")
def doc_path_fixture(tmp_path):
    """SAMPLE_DOC written to tmp_path/demo.md."""
    path = tmp_path / "demo.md"
    path.write_text(SAMPLE_DOC, encoding="utf-8")
    return path
