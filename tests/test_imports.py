from kaori_compiler import CompilerOptions, transform
from kaori_compiler.compiler.imports import BindingTable, find_free_name
from kaori_compiler.compiler.parser import KaoriParser


def compile_jsx(source: str, **options) -> str:
    return transform(source, "test.jsx", CompilerOptions(source_maps=False, **options)).code


def scan(source: str) -> BindingTable:
    module = KaoriParser().parse(source, "test.jsx")
    return BindingTable().scan(module)


def test_find_free_name():
    assert find_free_name("html", set()) == "html"
    assert find_free_name("html", {"html"}) == "html1"
    assert find_free_name("html", {"html", "html1", "html2"}) == "html3"


def test_no_markup_leaves_source_untouched():
    source = "const a = 1;\nexport default a;\n"
    assert compile_jsx(source) == source


def test_only_needed_symbols_are_imported():
    code = compile_jsx("const el = <div />;")
    assert code.splitlines()[0] == 'import { html } from "kaori.js";'
    assert "component" not in code


def test_import_lists_symbols_in_canonical_order():
    code = compile_jsx(
        "const el = <div ref={r} classMap={c} style={s}><Comp {...p} x={1} /></div>;"
    )
    assert code.splitlines()[0] == (
        'import { component, html, ref, styleMap, classMap, mergeProps } from "kaori.js";'
    )


def test_colliding_names_get_suffix():
    code = compile_jsx("const html = 1;\nconst html1 = 2;\nconst el = <div />;")
    assert code.splitlines()[0] == 'import { html as html2 } from "kaori.js";'
    assert "const el = html2`<div></div>`;" in code


def test_member_property_names_count_as_taken():
    table = scan("config.component = 1;")
    assert table.name("component") == "component1"


def test_tag_names_are_not_bindings():
    table = scan("const page = <html><body /></html>;")
    assert table.name("html") == "html"


def test_existing_import_is_reused():
    source = 'import { html as h, component } from "kaori.js";\nconst el = <div><App /></div>;'
    code = compile_jsx(source)
    assert code == (
        'import { html as h, component } from "kaori.js";\n'
        "const el = h`<div>${component(App, {})}</div>`;"
    )


def test_existing_import_from_path_matches_package():
    source = 'import { html } from "/@fs/project/kaori/src/index.ts";\nconst el = <p />;'
    code = compile_jsx(source)
    assert code.count("import") == 1
    assert "html`<p></p>`" in code


def test_unrelated_import_is_ignored():
    table = scan('import { html } from "lit";\nconst x = html;')
    assert not table.bindings["html"].exists
    assert table.name("html") == "html1"


def test_missing_symbols_are_added_next_to_existing_ones():
    source = 'import { html } from "kaori.js";\nconst el = <App />;'
    code = compile_jsx(source)
    assert code.splitlines()[0] == 'import { component } from "kaori.js";'
    assert code.splitlines()[1] == 'import { html } from "kaori.js";'


def test_custom_package_name():
    code = compile_jsx("const el = <div />;", package_name="@acme/kaori")
    assert code.splitlines()[0] == 'import { html } from "@acme/kaori";'


def test_import_goes_after_directives_and_hashbang():
    source = '#!/usr/bin/env node\n"use strict";\nconst el = <div />;\n'
    code = compile_jsx(source)
    assert code == (
        "#!/usr/bin/env node\n"
        '"use strict";\n'
        'import { html } from "kaori.js";\n'
        "const el = html`<div></div>`;\n"
    )
