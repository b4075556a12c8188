import unittest

from kaori_compiler import CompilerOptions, transform


def compile_jsx(source: str, **options) -> str:
    return transform(source, "test.jsx", CompilerOptions(source_maps=False, **options)).code


class TestElementCodegen(unittest.TestCase):
    def test_static_attributes_and_text(self) -> None:
        code = compile_jsx('const el = <div class="a">hi</div>;')
        self.assertEqual(
            code,
            'import { html } from "kaori.js";\n'
            'const el = html`<div class="a">hi</div>`;',
        )

    def test_class_name_is_normalized(self) -> None:
        code = compile_jsx('const el = <div className="a" />;')
        self.assertIn('html`<div class="a"></div>`', code)

    def test_dynamic_attribute_hole(self) -> None:
        code = compile_jsx("const el = <a href={url}>go</a>;")
        self.assertIn("html`<a href=${url}>go</a>`", code)

    def test_bare_attribute_is_true(self) -> None:
        code = compile_jsx("const el = <button disabled={flag} hidden>x</button>;")
        self.assertIn("html`<button disabled=${flag} hidden=${true}>x</button>`", code)

    def test_event_binding(self) -> None:
        code = compile_jsx("const el = <button onClick={handle}>x</button>;")
        self.assertIn("<button @click=${handle}>", code)

        code = compile_jsx("const el = <input onKeyDown={() => save()} />;")
        self.assertIn("<input @keydown=${() => save()} />", code)

    def test_namespaced_bindings(self) -> None:
        code = compile_jsx(
            "const el = <input prop:value={v} bool:disabled={d} xlink:href={h} />;"
        )
        self.assertIn("<input .value=${v} ?disabled=${d} xlink:href=${h} />", code)

    def test_quotes_in_static_value_are_escaped(self) -> None:
        code = compile_jsx("const el = <div title='say \"hi\"' />;")
        self.assertIn('<div title="say &quot;hi&quot;"></div>', code)

    def test_ref_directive(self) -> None:
        code = compile_jsx("const el = <input ref={inputRef} />;")
        self.assertIn("html`<input ${ref(inputRef)} />`", code)
        self.assertIn('import { html, ref } from "kaori.js";', code)

    def test_style_object_uses_style_map(self) -> None:
        code = compile_jsx("const el = <div style={{ color: c }}>x</div>;")
        self.assertIn("<div style=${styleMap({ color: c })}>x</div>", code)
        self.assertIn("styleMap", code.splitlines()[0])

    def test_style_identifier_and_call_use_style_map(self) -> None:
        self.assertIn("style=${styleMap(styles)}", compile_jsx("<div style={styles} />;"))
        self.assertIn(
            "style=${styleMap(getStyle())}", compile_jsx("<div style={getStyle()} />;")
        )
        self.assertIn(
            "style=${styleMap(on && s)}", compile_jsx("<div style={on && s} />;")
        )

    def test_style_string_stays_static(self) -> None:
        code = compile_jsx('const el = <div style="color: red" />;')
        self.assertIn('<div style="color: red"></div>', code)
        self.assertNotIn("styleMap", code)

    def test_style_template_string_is_plain_hole(self) -> None:
        code = compile_jsx("const el = <div style={`color: ${c}`} />;")
        self.assertIn("<div style=${`color: ${c}`}></div>", code)
        self.assertNotIn("styleMap", code)

    def test_class_map(self) -> None:
        code = compile_jsx("const el = <div classMap={{ active: isOn }} />;")
        self.assertIn("<div class=${classMap({ active: isOn })}></div>", code)

    def test_spread_on_element(self) -> None:
        code = compile_jsx("const el = <button {...props} type=\"button\">Go</button>;")
        self.assertIn('<button ${spread(props)} type="button">Go</button>', code)
        self.assertIn('import { html, spread } from "kaori.js";', code)

    def test_void_elements_never_get_children(self) -> None:
        code = compile_jsx('const el = <img src="a.png" />;')
        self.assertIn('html`<img src="a.png" />`', code)

        code = compile_jsx("const el = <br></br>;")
        self.assertIn("html`<br />`", code)

    def test_non_void_self_closing_element_is_closed(self) -> None:
        code = compile_jsx("const el = <span />;")
        self.assertIn("html`<span></span>`", code)

    def test_expression_children(self) -> None:
        code = compile_jsx("const el = <p>Hello {name}!</p>;")
        self.assertIn("html`<p>Hello ${name}!</p>`", code)

    def test_nested_markup_in_expression_child(self) -> None:
        code = compile_jsx("const el = <div>{ok && <b>yes</b>}</div>;")
        self.assertIn("html`<div>${ok && html`<b>yes</b>`}</div>`", code)

    def test_backtick_in_text_is_escaped(self) -> None:
        code = compile_jsx("const el = <code>a`b</code>;")
        self.assertIn("html`<code>a\\`b</code>`", code)


class TestStaticInlining(unittest.TestCase):
    def test_static_subtree_is_flattened(self) -> None:
        code = compile_jsx(
            'const el = <div><span class="x" hidden>hi <em>there</em></span></div>;'
        )
        self.assertIn(
            'html`<div><span class="x" hidden>hi <em>there</em></span></div>`', code
        )

    def test_dynamic_child_element_is_inlined_with_holes(self) -> None:
        code = compile_jsx("const el = <ul><li onClick={f}>a</li></ul>;")
        self.assertIn("html`<ul><li @click=${f}>a</li></ul>`", code)
        self.assertEqual(code.count("html`"), 1)

    def test_component_inside_element_is_a_hole(self) -> None:
        code = compile_jsx("const el = <div><Icon name=\"x\" /></div>;")
        self.assertIn('html`<div>${component(Icon, { name: "x" })}</div>`', code)

    def test_false_boolean_literal_is_omitted(self) -> None:
        code = compile_jsx("const el = <div><input checked={false} /></div>;")
        self.assertIn("html`<div><input /></div>`", code)


class TestWhitespace(unittest.TestCase):
    def test_newline_whitespace_is_dropped(self) -> None:
        code = compile_jsx("const el = (\n  <div>\n    <span>{a}</span>\n  </div>\n);")
        self.assertIn("html`<div><span>${a}</span></div>`", code)

    def test_inline_whitespace_is_kept(self) -> None:
        code = compile_jsx("const el = <p>{a} {b}</p>;")
        self.assertIn("html`<p>${a} ${b}</p>`", code)

    def test_inline_whitespace_can_be_dropped(self) -> None:
        code = compile_jsx("const el = <p>{a} {b}</p>;", keep_inline_whitespace=False)
        self.assertIn("html`<p>${a}${b}</p>`", code)

    def test_text_keeps_surrounding_inline_spaces(self) -> None:
        code = compile_jsx("const el = <p>{a}  and  {b}</p>;")
        self.assertIn("html`<p>${a}  and  ${b}</p>`", code)

    def test_newline_whitespace_is_dropped_in_static_subtrees(self) -> None:
        code = compile_jsx(
            "const el = <div><ul>\n  <li>a</li>\n  <li>b</li>\n</ul></div>;"
        )
        self.assertIn("html`<div><ul><li>a</li><li>b</li></ul></div>`", code)

    def test_static_subtrees_follow_inline_whitespace_option(self) -> None:
        source = "const el = <div><p><b>x</b> <i>y</i></p></div>;"
        self.assertIn("<p><b>x</b> <i>y</i></p>", compile_jsx(source))

        code = compile_jsx(source, keep_inline_whitespace=False)
        self.assertIn("html`<div><p><b>x</b><i>y</i></p></div>`", code)


if __name__ == "__main__":
    unittest.main()
