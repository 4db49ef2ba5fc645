"""Tests for core.syntax — tree-sitter parse checks."""

from core.state import FileEntry
from core.syntax import check_source, check_syntax

VALID_PAGE = """import Link from "next/link";

export default function Page() {
  const items: string[] = ["a", "b"];
  return (
    <main className="p-4 md:p-8">
      {items.map((item) => (
        <Link key={item} href={`/${item}`}>{item}</Link>
      ))}
    </main>
  );
}
"""


def test_valid_tsx_passes():
    assert check_source("app/page.tsx", VALID_PAGE) is None


def test_valid_typescript_passes():
    content = "export function add(a: number, b: number): number {\n  return a + b;\n}\n"
    assert check_source("lib/math.ts", content) is None


def test_valid_javascript_passes():
    assert check_source("next.config.mjs", "const config = {};\nexport default config;\n") is None


def test_broken_tsx_reports_location():
    content = "const a = 1;\nconst b = 2;\nconst c = ) ;\n"
    issue = check_source("lib/values.ts", content)
    assert issue is not None
    assert issue.category == "syntax"
    assert issue.severity == "error"
    assert issue.rule == "syntax/parse"
    assert issue.line == 3
    assert issue.column >= 1


def test_unclosed_block_reported():
    content = "export default function Page() {\n  return <div>hello</div>;\n"
    issue = check_source("app/page.tsx", content)
    assert issue is not None
    assert issue.path == "app/page.tsx"


def test_invalid_json_reports_decoder_position():
    issue = check_source("package.json", '{"a": 1,}')
    assert issue is not None
    assert (issue.line, issue.column) == (1, 9)


def test_unknown_extension_ignored():
    assert check_source("app/globals.css", "this is { not valid ts") is None


def test_check_syntax_one_issue_per_broken_file_in_order():
    files = [
        FileEntry(path="app/page.tsx", content=VALID_PAGE),
        FileEntry(path="b.ts", content="let = ;\nlet = ;\n"),
        FileEntry(path="README.md", content="# not code {"),
        FileEntry(path="a.json", content="{"),
    ]
    issues = check_syntax(files)
    assert [i.path for i in issues] == ["b.ts", "a.json"]


def test_check_syntax_respects_extension_filter():
    files = [FileEntry(path="a.json", content="{")]
    assert check_syntax(files, extensions=[".ts"]) == []
