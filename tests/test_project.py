"""Tests for the tree-sitter source project."""

from prodready.file_index import build_file_index
from prodready.project import (
    CompilerConfig,
    SourceProject,
    create_project,
    load_compiler_config,
)


def _project(tree, config=None) -> SourceProject:
    files = build_file_index(tree.root)
    return create_project(tree.root, files, config)


class TestCompilerConfig:
    def test_no_config_defaults_to_jsx(self, tree):
        config = load_compiler_config(tree.root)
        assert config.path is None
        assert config.js_has_jsx

    def test_reads_tsconfig_with_comments(self, tree):
        tree.write(
            "tsconfig.json",
            """
            {
              // Next.js defaults
              "compilerOptions": {
                "jsx": "preserve", /* keep */
                "paths": { "@/*": ["./src/*"] },
              },
            }
            """,
        )
        config = load_compiler_config(tree.root)
        assert config.path == tree.root / "tsconfig.json"
        assert config.jsx == "preserve"
        assert config.js_has_jsx

    def test_tsconfig_without_jsx(self, tree):
        tree.write("tsconfig.json", '{"compilerOptions": {"strict": true}}')
        config = load_compiler_config(tree.root)
        assert config.jsx is None
        assert not config.js_has_jsx

    def test_jsconfig_without_jsx(self, tree):
        tree.write(
            "jsconfig.json",
            '{"compilerOptions": {"baseUrl": ".", '
            '"paths": {"@/*": ["src/*"]}}}',
        )
        config = load_compiler_config(tree.root)
        assert config.path == tree.root / "jsconfig.json"
        assert config.jsx is None
        assert config.js_has_jsx

    def test_invalid_tsconfig_falls_back(self, tree):
        tree.write("tsconfig.json", "{ not json")
        config = load_compiler_config(tree.root)
        assert config.path is None


class TestSourceProject:
    def test_parses_code_files(self, tree):
        tree.write(
            "src/app/page.tsx",
            """
            export default function Page() {
              return <main>hello</main>;
            }
            """,
        )
        tree.write("src/lib/util.ts", "export const n: number = 1;")
        project = _project(tree)
        assert len(project) == 2
        assert project.skipped == []

    def test_syntax_errors_are_skipped(self, tree):
        tree.write("src/broken.ts", "export const = ;;; function (")
        tree.write("src/ok.ts", "export const ok = true;")
        project = _project(tree)

        assert len(project) == 1
        assert project.skipped == ["src/broken.ts"]

    def test_migrations_are_not_parsed(self, tree):
        tree.write("supabase/migrations/001.sql", "create table t ();")
        files = build_file_index(tree.root)
        project = create_project(tree.root, files)

        assert len(project) == 0
        assert project.get_source_file(files[0].file_path) is None

    def test_directives(self, tree):
        tree.write(
            "src/client.tsx",
            """
            'use client';
            export function A() { return <div />; }
            """,
        )
        tree.write(
            "src/actions.ts",
            """
            // server actions
            "use server";
            export async function save() {}
            """,
        )
        tree.write("src/plain.ts", "const x = 'use client';")
        files = {f.relative_path: f for f in build_file_index(tree.root)}
        project = create_project(tree.root, list(files.values()))

        client = project.get_source_file(files["src/client.tsx"].file_path)
        actions = project.get_source_file(files["src/actions.ts"].file_path)
        plain = project.get_source_file(files["src/plain.ts"].file_path)
        assert client.is_client
        assert actions.is_server_module
        assert plain.directive is None

    def test_dialect_for_js_follows_config(self, tree):
        with_jsx = SourceProject(tree.root, CompilerConfig())
        without_jsx = SourceProject(
            tree.root, CompilerConfig(path=tree.root / "tsconfig.json")
        )
        assert with_jsx.dialect_for(".js") == "tsx"
        assert without_jsx.dialect_for(".js") == "typescript"
        assert without_jsx.dialect_for(".jsx") == "tsx"
        assert without_jsx.dialect_for(".ts") == "typescript"

    def test_js_with_jsx_parses_under_either_config(self, tree):
        page = """
            export default function About() {
              return <button onClick={() => {}}>Hi</button>;
            }
            """
        plain = "export const cast = <T>(x) => x;"
        tree.write("src/app/about/page.js", page)
        tree.write("src/lib/plain.js", plain)

        for config in ("jsconfig.json", "tsconfig.json"):
            tree.write(config, '{"compilerOptions": {"strict": true}}')
            project = _project(tree)
            assert project.skipped == []
            assert len(project) == 2
            (tree.root / config).unlink()

    def test_line_helpers(self, tree):
        tree.write(
            "src/a.ts",
            """
            const a = 1;
            const b = fetch('/api/x');
            """,
        )
        (entry,) = build_file_index(tree.root)
        project = create_project(tree.root, [entry])
        parsed = project.get_source_file(entry.file_path)

        (call,) = list(parsed.iter_nodes("call_expression"))
        assert parsed.line_of(call) == 2
        assert parsed.line_text(2) == "const b = fetch('/api/x');"
        assert parsed.node_text(call) == "fetch('/api/x')"
