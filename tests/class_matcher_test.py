import sys
import os
import json
from collections import namedtuple
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from comparator.class_matcher import Finding, find_undefined_classes, find_unused_classes
from comparator.report_builder import build_json_report, format_diagnostic
from core.css_class_extractor import extract_classes, extract_classes_from_file
from core.lint_options import TransformPolicy


FILES = os.path.join(os.path.dirname(__file__), 'files')
NO_UNUSED_3 = extract_classes_from_file(os.path.join(FILES, 'noUnusedClass3.scss'))


Access = namedtuple('Access', 'token line column')


def literal(token, line=1, column=1):
    return Access(token, line, column)


class Result:
    def __init__(self, unused=(), undefined=()):
        self.unused = list(unused)
        self.undefined = list(undefined)

    def to_dict(self):
        return {'unused': [f.to_dict() for f in self.unused],
                'undefined': [f.to_dict() for f in self.undefined]}


def test_unused_message_uses_stylesheet_basename():
    exports = extract_classes_from_file(os.path.join(FILES, 'noUnusedClass1.scss'))
    finding = find_unused_classes(exports, ['bar'], stylesheet_path='./noUnusedClass1.scss')
    assert finding.message == 'Unused classes found in noUnusedClass1.scss: foo, bold'
    assert finding.unused_class_names == ('foo', 'bold')

def test_everything_used_returns_none():
    exports = extract_classes(".a { color: red; } .b { color: blue; }")
    assert find_unused_classes(exports, ['a', 'b']) is None

def test_suppressed_classes_are_never_reported():
    exports = extract_classes_from_file(os.path.join(FILES, 'composesMultiple1.scss'))
    finding = find_unused_classes(exports, ['bar'], stylesheet_path='composesMultiple1.scss')
    assert finding.unused_class_names == ('baz',)

def test_mark_as_used():
    exports = extract_classes(".a { color: red; } .b { color: blue; }")
    assert find_unused_classes(exports, [], mark_as_used=['a', 'b']) is None
    assert find_unused_classes(exports, [], mark_as_used=['a']).unused_class_names == ('b',)

def test_camel_case_true_accepts_both_spellings():
    used = ['fooBar', 'barFoo', 'alreadyCamelCased', 'snakeCased']
    assert find_unused_classes(NO_UNUSED_3, used, TransformPolicy.CAMEL_CASE) is None
    used = ['foo-bar', 'bar-foo', 'alreadyCamelCased', 'snake_cased']
    assert find_unused_classes(NO_UNUSED_3, used, TransformPolicy.CAMEL_CASE) is None
    finding = find_unused_classes(NO_UNUSED_3, ['fooBar'], TransformPolicy.CAMEL_CASE, 'noUnusedClass3.scss')
    assert finding.message == 'Unused classes found in noUnusedClass3.scss: bar-foo, alreadyCamelCased, snake_cased'

def test_camel_case_dashes_leaves_underscores():
    used = ['fooBar', 'barFoo', 'alreadyCamelCased', 'snake_cased']
    assert find_unused_classes(NO_UNUSED_3, used, TransformPolicy.DASHES) is None
    finding = find_unused_classes(NO_UNUSED_3, ['fooBar', 'snakeCased'], TransformPolicy.DASHES)
    assert finding.unused_class_names == ('bar-foo', 'alreadyCamelCased', 'snake_cased')

def test_camel_case_only_rejects_raw_names():
    used = ['foo-bar', 'barFoo', 'snakeCased', 'bar']
    finding = find_unused_classes(NO_UNUSED_3, used, TransformPolicy.ONLY)
    assert finding.unused_class_names == ('foo-bar', 'alreadyCamelCased')

def test_camel_case_dashes_only():
    used = ['foo-bar', 'barFoo', 'snakeCased', 'bar']
    finding = find_unused_classes(NO_UNUSED_3, used, TransformPolicy.DASHES_ONLY)
    assert finding.unused_class_names == ('foo-bar', 'alreadyCamelCased', 'snake_cased')

def test_snake_case_camel_form_depends_on_policy():
    exports = extract_classes(".snake_cased { color: red; }")
    assert find_unused_classes(exports, ['snakeCased'], TransformPolicy.DASHES) is not None
    assert find_unused_classes(exports, ['snakeCased'], TransformPolicy.CAMEL_CASE) is None

def test_only_policy_rejects_raw_token_in_both_checks():
    exports = extract_classes(".foo-bar { color: red; }")
    assert find_unused_classes(exports, ['foo-bar'], TransformPolicy.ONLY) is not None
    undefined = find_undefined_classes(exports, [literal('foo-bar')], TransformPolicy.ONLY)
    assert [f.class_name for f in undefined] == ['foo-bar']

def test_undefined_reports_each_unknown_access():
    exports = extract_classes(".container { display: flex; }")
    accesses = [literal('container'), literal('missing', 3, 7), literal('missing', 5, 2),
                Access(None, 6, 1), literal('_getCss')]
    findings = find_undefined_classes(exports, accesses, stylesheet_path='./a.scss')
    assert [(f.class_name, f.line, f.column) for f in findings] == [('missing', 3, 7), ('missing', 5, 2)]
    assert findings[0].message == "Class or exported property 'missing' not found"

def test_undefined_accepts_exported_and_suppressed_names():
    exports = extract_classes_from_file(os.path.join(FILES, 'export1.scss'))
    assert find_undefined_classes(exports, [literal('primaryColor'), literal('bar')]) == []

def test_undefined_respects_camel_case():
    exports = extract_classes(".foo-bar { color: red; }")
    assert find_undefined_classes(exports, [literal('fooBar')], TransformPolicy.CAMEL_CASE) == []
    assert len(find_undefined_classes(exports, [literal('fooBar')], TransformPolicy.OFF)) == 1

def test_diagnostic_and_json_report():
    finding = Finding('./a.scss', ('x', 'y'), 2, 3)
    assert format_diagnostic('src/A.jsx', finding) == 'src/A.jsx:2:3: Unused classes found in a.scss: x, y'
    results = {'src/A.jsx': Result(unused=[finding]),
               'src/B.jsx': Result()}
    report = json.loads(build_json_report(results))
    assert list(report) == ['src/A.jsx']
    assert report['src/A.jsx']['unused'][0]['unused_classes'] == ['x', 'y']
    assert report['src/A.jsx']['undefined'] == []
