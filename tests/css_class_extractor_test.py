import sys
import os
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from core.css_class_extractor import (
    ClassDeclaration,
    StylesheetExports,
    extract_classes,
    extract_classes_from_file,
)
from core.errors import StylesheetParseError

FILES = os.path.join(os.path.dirname(__file__), 'files')


def load(name):
    return extract_classes_from_file(os.path.join(FILES, name))


def suppressed(exports):
    return [d.name for d in exports if d.suppressed]


def test_plain_classes_in_declaration_order():
    exports = load('noUnusedClass1.scss')
    assert exports.names() == ['foo', 'bold']
    assert suppressed(exports) == []

def test_selector_list_media_and_pseudo_arguments():
    exports = load('plain1.css')
    assert exports.names() == ['header', 'footer', 'sidebar', 'title', 'hidden']

def test_keyframes_steps_are_not_classes():
    exports = extract_classes("@keyframes fade { from { opacity: 0 } to { opacity: 1 } }")
    assert len(exports) == 0

def test_global_selectors_are_excluded():
    exports = load('noUnusedClass2.scss')
    assert exports.names() == ['foo']

def test_local_function_keeps_classes():
    exports = extract_classes(":local(.foo) .bar { color: red; } :global .baz :local(.qux) { margin: 0; }")
    assert exports.names() == ['foo', 'bar', 'qux']

def test_export_names_are_suppressed():
    exports = load('export1.scss')
    assert exports.names() == ['primaryColor', 'bar']
    assert suppressed(exports) == ['primaryColor']

def test_import_block_is_ignored():
    exports = extract_classes(':import("./other.css") { imported: foo; } .a { color: red; }')
    assert exports.names() == ['a']

def test_composition_target_with_body_is_tracked():
    exports = load('composes1.scss')
    assert exports.names() == ['baz', 'bar']
    assert suppressed(exports) == []

def test_composition_targets_without_body_are_suppressed():
    exports = load('composesMultiple1.scss')
    assert exports.names() == ['foo', 'qux', 'bar', 'baz']
    assert suppressed(exports) == ['foo', 'qux']

def test_composes_from_other_file_adds_nothing():
    exports = extract_classes(".a { composes: b c from './other.css'; }")
    assert exports.names() == ['a']

def test_scss_extend_targets():
    exports = load('extend1.scss')
    assert exports.names() == ['foo', 'bar', 'baz']
    assert suppressed(exports) == ['foo']

def test_parent_selector_suffixes():
    exports = load('parentSelector4.scss')
    assert exports.names() == ['foo', 'foo_bar', 'foo_baz']
    assert suppressed(exports) == []

def test_nesting_only_parent_is_suppressed():
    exports = load('parentSelector7.scss')
    assert exports.names() == ['foo', 'foo_bar', 'foo_baz']
    assert suppressed(exports) == ['foo']

def test_bare_parent_reference_gives_body_to_parent_class():
    exports = load('parentSelector8.scss')
    assert exports.names() == ['foo', 'foo_bar']
    assert suppressed(exports) == []

def test_descendant_nesting_without_ampersand():
    exports = extract_classes(".a { .b { color: red; } }", 'scss')
    assert exports.names() == ['a', 'b']
    assert suppressed(exports) == ['a']

def test_media_inside_rule_counts_as_body():
    exports = extract_classes(".a { @media (max-width: 10px) { color: red; } }", 'scss')
    assert exports.names() == ['a']
    assert suppressed(exports) == []

def test_at_root_rules_are_not_nested():
    exports = extract_classes(".a { color: red; @at-root .b { color: blue; } }", 'scss')
    assert exports.names() == ['a', 'b']

def test_scss_interpolation_is_skipped():
    exports = extract_classes("$n: x; .icon-#{$n} { color: red; } .plain { color: blue; }", 'scss')
    assert exports.names() == ['plain']

def test_line_comments_only_stripped_for_preprocessors():
    scss = extract_classes("// .ghost { }\n.real { color: red; }", 'scss')
    assert scss.names() == ['real']
    css = extract_classes('.a { background: url(http://example.com/x.png); }', 'css')
    assert css.names() == ['a']

def test_url_keeps_double_slash_in_scss():
    exports = extract_classes('.a { background: url(http://example.com/x.png); } .b { color: red; }', 'scss')
    assert exports.names() == ['a', 'b']

def test_less_mixins_and_extend():
    exports = load('noUnusedClass1.less')
    assert exports.names() == ['foo']

def test_less_extend_in_selector_and_statement():
    less = ".base { color: red; } .a:extend(.base) { margin: 0; } .b { &:extend(.c); padding: 0; } .c {}"
    exports = extract_classes(less, 'less')
    assert exports.names() == ['base', 'a', 'b', 'c']
    assert suppressed(exports) == ['c']

def test_less_variable_interpolation_is_skipped():
    exports = extract_classes("@p: x; .@{p}-item { color: red; } .ok { color: blue; }", 'less')
    assert exports.names() == ['ok']

def test_duplicate_declarations_merge():
    exports = extract_classes(".a {} .b { color: red; } .a { color: blue; }")
    assert exports.names() == ['a', 'b']
    assert exports.get('a') == ClassDeclaration('a', 0, False)

def test_broken_stylesheet_raises_with_path():
    with pytest.raises(StylesheetParseError) as excinfo:
        load('broken1.scss')
    assert excinfo.value.path is not None
    assert 'broken1.scss' in str(excinfo.value)
    assert excinfo.value.line == 4

def test_dangling_selector_raises():
    with pytest.raises(StylesheetParseError):
        extract_classes(".a { color: red; } .b")

def test_unterminated_string_raises():
    with pytest.raises(StylesheetParseError):
        extract_classes('.a { content: "oops }')

def test_exports_reject_duplicates():
    with pytest.raises(ValueError):
        StylesheetExports([ClassDeclaration('a', 0), ClassDeclaration('a', 1)])

def test_exports_to_dict():
    exports = load('export1.scss')
    assert exports.to_dict() == {
        'primaryColor': {'position': 0, 'suppressed': True},
        'bar': {'position': 1, 'suppressed': False},
    }
    assert 'bar' in exports
    assert [d.name for d in exports.unsuppressed()] == ['bar']

def test_undecodable_stylesheet_raises_parse_error():
    with pytest.raises(StylesheetParseError) as excinfo:
        load('invalidUtf8.scss')
    assert excinfo.value.path is not None
    assert 'invalidUtf8.scss' in str(excinfo.value)

def test_missing_stylesheet_raises_parse_error():
    with pytest.raises(StylesheetParseError):
        load('doesNotExist.scss')
