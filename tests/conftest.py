"""Test setup for templar."""

from __future__ import annotations

import shutil
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from templar.render import get_render_settings, set_render_settings  # noqa: E402

EXAM_SOURCE = '''---
title: "Example"
output: html_document
---

```{r, include=FALSE}
knitr::opts_chunk$set(echo = TRUE)
templar::versions()
```

%%%
version: A

You are taking **Exam A**
%%%

%%%
version: B

You are taking **Exam B**
%%%

## Question 1: Means

Find the mean of the vector `a`

```{r, version = "A"}
set.seed(123)
```

```{r, version = "B"}
set.seed(456)
```

```{r}
a <- rnorm(10)
```

%%%
version: solution

The mean is `r mean(a)`
%%%
'''


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for pytest.

    This allows skipping tests that shell out to a real pandoc:
        pytest -m "not pandoc"
    """
    config.addinivalue_line(
        "markers",
        "pandoc: marks tests that need the pandoc executable on PATH",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if shutil.which("pandoc"):
        return
    skip = pytest.mark.skip(reason="pandoc executable not found")
    for item in items:
        if "pandoc" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def exam_lines() -> list[str]:
    """The two-version exam document, one entry per line (line 1 is '---')."""
    return EXAM_SOURCE.splitlines()


@pytest.fixture
def exam_file(tmp_path: Path) -> Path:
    """The exam document written to disk as exam.Rmd."""
    path = tmp_path / "exam.Rmd"
    path.write_text(EXAM_SOURCE, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def restore_render_settings():
    """Keep global render settings from leaking between tests."""
    snapshot = get_render_settings()
    yield
    set_render_settings(snapshot)
