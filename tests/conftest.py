"""Shared fixtures: a throwaway site tree with English articles."""

from pathlib import Path

import pytest

from doctrans_llms.models import Article, TranslationTask


SCENARIO_ARTICLE = """---
title: "Add Watermark to PDF"
---

## Step 1
Do X.
{{< gist user id >}}
"""


FULL_ARTICLE = """---
title: "Add Watermark to PDF"
description: "Learn how to add a text watermark to a PDF document in C#."
keywords: [
    "add watermark to pdf",
    "pdf watermark in c#"
    ]
productname: "GroupDocs.Watermark for .NET"
productkey: "watermark"
platformkey: "net"
weight: 1
step1: "Load the PDF document"
step2: "Save the result"
---

## Overview

Use the `Watermarker` class to add a watermark. See the [API reference](https://reference.groupdocs.com/watermark/net/).

## Steps

1. Create a `Watermarker` instance
2. Call the `Add` method

```csharp
using (Watermarker watermarker = new Watermarker("input.pdf"))
{
    watermarker.Add(new TextWatermark("Confidential", new Font("Arial", 19)));
    watermarker.Save("output.pdf");
}
```

{{< gist groupdocs-watermark add-watermark-net >}}

## Conclusion

Watermarking a PDF in C# with the .NET API takes a few lines of code.
"""


def write_article(repo_root: Path, text: str, product="watermark", platform="net", slug="add-watermark") -> Path:
    path = repo_root / "content" / "en" / product / platform / slug / "_index.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def make_task(path: Path, languages, title="Add Watermark to PDF", product="watermark", platform="net") -> TranslationTask:
    article = Article(
        full_path=path,
        product=product,
        platform=platform,
        article_path="add-watermark/_index.md",
        title=title,
    )
    return TranslationTask(article=article, target_languages=tuple(languages))


@pytest.fixture
def repo_root(tmp_path):
    return tmp_path


@pytest.fixture
def scenario_task(repo_root):
    return make_task(write_article(repo_root, SCENARIO_ARTICLE), ["fr"])


@pytest.fixture
def full_task(repo_root):
    return make_task(write_article(repo_root, FULL_ARTICLE), ["fr", "de"])
