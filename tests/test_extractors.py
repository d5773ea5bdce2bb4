"""Tests for the graph extractors, run against small fixture projects."""

from prodready.extractors.migrations import normalize_table, scan_migration
from prodready.graph import (
    CallsiteNode,
    EndpointNode,
    EnvVarNode,
    MigrationNode,
    RouteNode,
    SupabaseQueryNode,
    UiActionNode,
)


class TestRoutesExtractor:
    def test_pages_and_route_handlers(self, tree):
        tree.write("src/app/page.tsx", "export default function H() {}")
        tree.write(
            "src/app/(public)/about/page.tsx",
            "export default function A() {}",
        )
        tree.write(
            "src/app/api/posts/route.ts",
            "export async function GET() {}",
        )
        tree.write("src/components/page.tsx", "export const x = 1;")

        routes = {r.path: r for r in tree.graph().of_kind(RouteNode)}

        assert set(routes) == {"/", "/(public)/about", "/api/posts"}
        assert routes["/"].is_page
        assert routes["/api/posts"].is_api_route
        assert not routes["/api/posts"].is_page
        assert routes["/(public)/about"].file_path == (
            "src/app/(public)/about/page.tsx"
        )

    def test_js_pages_with_jsconfig(self, tree):
        tree.write(
            "jsconfig.json",
            '{"compilerOptions": {"paths": {"@/*": ["./src/*"]}}}',
        )
        tree.write(
            "src/app/about/page.js",
            """
            export default function About() {
              return <button onClick={() => {}}>Soon</button>;
            }
            """,
        )
        graph = tree.graph()

        assert [r.path for r in graph.of_kind(RouteNode)] == ["/about"]
        (action,) = graph.of_kind(UiActionNode)
        assert action.empty_handler

    def test_unparseable_route_file_is_ignored(self, tree):
        tree.write("src/app/broken/page.tsx", "export default function ( {")
        tree.write("src/app/ok/page.tsx", "export default function O() {}")

        paths = [r.path for r in tree.graph().of_kind(RouteNode)]
        assert paths == ["/ok"]


class TestEndpointsExtractor:
    def test_route_handler_methods(self, tree):
        tree.write(
            "src/app/api/posts/route.ts",
            """
            import { NextResponse } from 'next/server';

            export async function GET() {
              return NextResponse.json([]);
            }

            export const POST = async (req: Request) => {
              const body = await req.json();
              return NextResponse.json(body);
            };

            async function remove() {
              const { data } = await supabase.auth.getUser();
              return NextResponse.json({ ok: !!data });
            }

            export { remove as DELETE };
            """,
        )
        endpoints = {
            e.method: e for e in tree.graph().of_kind(EndpointNode)
        }

        assert set(endpoints) == {"GET", "POST", "DELETE"}
        assert all(
            e.handler_kind == "route-handler" for e in endpoints.values()
        )
        assert all(
            e.path_or_name == "/api/posts" for e in endpoints.values()
        )
        assert not endpoints["GET"].mutates_data
        assert endpoints["POST"].mutates_data
        assert endpoints["POST"].has_auth_check is False
        assert endpoints["DELETE"].has_auth_check is True

    def test_server_actions(self, tree):
        tree.write(
            "src/app/actions.ts",
            """
            'use server';

            export async function createPost(formData: FormData) {
              await db.insert(formData);
            }

            export const LIMIT = 10;
            """,
        )
        tree.write(
            "src/lib/inline.ts",
            """
            export async function updatePost(id: string) {
              'use server';
              await requireUser();
              await db.update(id);
            }

            export function notAnAction() {
              return 1;
            }
            """,
        )
        actions = {
            e.path_or_name: e for e in tree.graph().of_kind(EndpointNode)
        }

        assert set(actions) == {"createPost", "updatePost"}
        assert actions["createPost"].handler_kind == "server-action"
        assert actions["createPost"].method is None
        assert actions["createPost"].mutates_data
        assert actions["createPost"].has_auth_check is False
        assert actions["updatePost"].has_auth_check is True


class TestCallsitesExtractor:
    def test_fetch_axios_and_router(self, tree):
        tree.write(
            "src/lib/client.ts",
            """
            fetch('/api/posts');
            fetch(`/api/posts/${id}`);
            fetch(url);
            fetch('relative/path');
            axios.post('/api/items', {});
            router.push('/dashboard');
            router.replace('/login');
            'abc'.replace('a', 'b');
            items.push(item);
            """,
        )
        calls = tree.graph().of_kind(CallsiteNode)
        found = [(c.call_kind, c.target_path, c.http_method) for c in calls]

        assert found == [
            ("fetch", "/api/posts", None),
            ("fetch", "/api/posts/${id}", None),
            ("axios", "/api/items", "POST"),
            ("router", "/dashboard", None),
            ("router", "/login", None),
        ]
        assert calls[0].line == 1
        assert calls[0].snippet == "fetch('/api/posts');"


class TestSupabaseExtractor:
    def test_query_chains(self, tree):
        tree.write(
            "src/lib/queries.ts",
            """
            export async function load(supabase: any, file: Blob) {
              const a = await supabase.from('posts').select('*');
              const b = await supabase.from('posts').select('id').range(0, 9);
              const c = await supabase.from('users').select('*').single();
              const d = await supabase
                .from('posts')
                .select('*', { count: 'exact', head: true });
              await supabase.from('posts').insert({ title: 'x' });
              await supabase.storage.from('avatars').upload('a.png', file);
              await supabase.rpc('increment', { x: 1 });
              const e = Array.from('abc');
            }
            """,
        )
        queries = {q.line: q for q in tree.graph().of_kind(SupabaseQueryNode)}

        assert sorted(queries) == [2, 3, 4, 5, 8, 9, 10]
        star = queries[2]
        assert (star.table, star.operation) == ("posts", "select")
        assert star.select_all is True
        assert star.has_pagination is False

        paged = queries[3]
        assert paged.select_all is False
        assert paged.has_pagination is True

        assert queries[4].is_single_row is True
        assert queries[5].is_count_only is True
        assert queries[8].operation == "insert"
        assert queries[8].select_all is None
        assert (queries[9].table, queries[9].operation) == (
            "avatars",
            "storage",
        )
        assert (queries[10].table, queries[10].operation) == (
            "increment",
            "rpc",
        )

    def test_builder_bound_to_variable(self, tree):
        tree.write(
            "src/lib/builder.ts",
            """
            export async function paged(supabase: any) {
              let query = supabase.from('posts').select('id');
              query = query.eq('published', true);
              return await query.range(0, 19);
            }

            export async function unpaged(supabase: any) {
              const rows = supabase.from('tags').select('id');
              const query = 1;
              return rows;
            }
            """,
        )
        queries = {q.table: q for q in tree.graph().of_kind(SupabaseQueryNode)}

        assert queries["posts"].has_pagination is True
        assert queries["posts"].operation == "select"
        assert queries["tags"].has_pagination is False

    def test_client_flag(self, tree):
        tree.write(
            "src/components/List.tsx",
            """
            'use client';
            export function List() {
              supabase.from('posts').select('id').limit(5);
              return <ul />;
            }
            """,
        )
        (query,) = tree.graph().of_kind(SupabaseQueryNode)
        assert query.is_client


class TestEnvExtractor:
    def test_reads_and_example_file(self, tree):
        tree.write(
            ".env.example", "NEXT_PUBLIC_SUPABASE_URL=\nSTRIPE_SECRET=x\n"
        )
        tree.write(
            "src/lib/env.ts",
            """
            const url = process.env.NEXT_PUBLIC_SUPABASE_URL;
            const key = process.env['SERVICE_KEY'];
            const { STRIPE_SECRET, OTHER: alias } = process.env;
            const again = process.env.NEXT_PUBLIC_SUPABASE_URL;
            """,
        )
        env = {e.name: e for e in tree.graph().of_kind(EnvVarNode)}

        assert set(env) == {
            "NEXT_PUBLIC_SUPABASE_URL",
            "SERVICE_KEY",
            "STRIPE_SECRET",
            "OTHER",
        }
        assert env["NEXT_PUBLIC_SUPABASE_URL"].is_public
        assert env["NEXT_PUBLIC_SUPABASE_URL"].in_example is True
        assert env["NEXT_PUBLIC_SUPABASE_URL"].line == 1
        assert env["SERVICE_KEY"].in_example is False
        assert not env["SERVICE_KEY"].is_public
        assert env["STRIPE_SECRET"].in_example is True
        assert env["OTHER"].in_example is False

    def test_no_example_file(self, tree):
        tree.write("src/a.ts", "export const s = process.env.SECRET;")
        (env,) = tree.graph().of_kind(EnvVarNode)
        assert env.in_example is None

    def test_client_file_flag(self, tree):
        tree.write(
            "src/components/Pay.tsx",
            """
            'use client';
            export const k = process.env.STRIPE_SECRET_KEY;
            """,
        )
        (env,) = tree.graph().of_kind(EnvVarNode)
        assert env.is_client_file


class TestMigrationsExtractor:
    def test_normalize_table(self):
        assert normalize_table('"public"."Profiles"') == "profiles"
        assert normalize_table("public.posts") == "posts"
        assert normalize_table("audit.events") == "audit.events"

    def test_tables_rls_policies_and_indexes(self):
        sql = """\
-- create table ignored ();
create table if not exists public.posts (id uuid primary key);
alter table public.posts enable row level security;
create policy "read posts" on public.posts for select using (true);
create table "Profiles" (id uuid);
create index posts_id_idx on posts (id);
/* drop table posts; */
"""
        nodes = scan_migration("supabase/migrations/001.sql", sql)
        by_table = {n.table: n for n in nodes}

        assert set(by_table) == {None, "posts", "profiles"}
        assert by_table[None].has_destructive_ddl is False

        posts = by_table["posts"]
        assert posts.created_in_file
        assert posts.rls_enabled is True
        assert posts.policy_count == 1
        assert posts.has_index
        assert posts.line == 2

        profiles = by_table["profiles"]
        assert profiles.rls_enabled is False
        assert profiles.policy_count == 0
        assert not profiles.has_index

    def test_rls_state_not_stated(self):
        nodes = scan_migration(
            "m.sql", "create policy p on posts using (true);"
        )
        (posts,) = [n for n in nodes if n.table]
        assert posts.rls_enabled is None
        assert not posts.created_in_file

    def test_disable_wins(self):
        sql = (
            "alter table posts enable row level security;\n"
            "alter table posts disable row level security;\n"
        )
        (posts,) = [n for n in scan_migration("m.sql", sql) if n.table]
        assert posts.rls_enabled is False

    def test_destructive_ddl(self):
        sql = "select 1;\nalter table posts drop column title;\n"
        file_node = scan_migration("m.sql", sql)[0]
        assert file_node.table is None
        assert file_node.has_destructive_ddl
        assert file_node.line == 2
        assert file_node.snippet == "alter table posts drop column title;"

    def test_only_migrations_dir_is_scanned(self, tree):
        tree.write("supabase/migrations/001.sql", "create table a (id int);")
        tree.write("supabase/seed.sql", "drop table a;")
        nodes = tree.graph().of_kind(MigrationNode)
        assert {n.file_path for n in nodes} == {"supabase/migrations/001.sql"}


class TestUiActionsExtractor:
    PAGE = """
        'use client';
        import Link from 'next/link';

        function handleSave() {
          // TODO: call the API
        }

        function handleDelete() {
          deletePost();
        }

        export default function Page() {
          return (
            <div>
              <button onClick={() => {}}>Empty</button>
              <button onClick={() => console.log('clicked')}>Log</button>
              <button onClick={handleSave}>Save</button>
              <Button aria-label="Remove" onClick={handleDelete} />
              <button onClick={() => handleDelete()}>Delete</button>
              <Link href="/about">About</Link>
              <a href="https://example.com">Ext</a>
              <form onSubmit={() => alert('Coming soon')}>Form</form>
            </div>
          );
        }
        """

    def _actions(self, tree) -> dict[str, UiActionNode]:
        tree.write("src/app/page.tsx", self.PAGE)
        return {a.label: a for a in tree.graph().of_kind(UiActionNode)}

    def test_elements_and_labels(self, tree):
        actions = self._actions(tree)
        assert set(actions) == {
            "Empty",
            "Log",
            "Save",
            "Remove",
            "Delete",
            "About",
            "Ext",
            "Form",
        }
        assert actions["Remove"].element == "Button"
        assert actions["Remove"].element_kind == "button"
        assert actions["About"].element_kind == "link"
        assert actions["About"].href == "/about"
        assert actions["Ext"].href == "https://example.com"
        assert actions["Form"].element_kind == "form"

    def test_stub_detection(self, tree):
        actions = self._actions(tree)

        assert actions["Empty"].empty_handler
        assert actions["Log"].log_only
        assert actions["Save"].handler_name == "handleSave"
        assert actions["Save"].todo_marker
        assert actions["Form"].log_only
        assert actions["Form"].todo_marker

        stubs = {label for label, a in actions.items() if a.is_stub}
        assert stubs == {"Empty", "Log", "Save", "Form"}

    def test_delegating_handlers_resolve(self, tree):
        actions = self._actions(tree)
        assert actions["Remove"].handler_name == "handleDelete"
        assert actions["Delete"].handler_name == "handleDelete"
        assert not actions["Delete"].is_stub
