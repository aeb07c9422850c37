"""CLI tests using typer's CliRunner."""
import json

import pytest
from typer.testing import CliRunner

from destructlint.main import app


runner = CliRunner()

VIOLATING = "function Foo(props) {\n  return <div>{props.x}</div>;\n}\n"
CLEAN = "const Foo = ({ x }) => <div>{x}</div>;\n"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer environment settings out of CLI runs."""
    for name in ('DESTRUCTLINT_MODE', 'DESTRUCTLINT_IGNORE_CLASS_FIELDS',
                 'DESTRUCTLINT_DESTRUCTURE_IN_SIGNATURE', 'DESTRUCTLINT_REACT_VERSION',
                 'DESTRUCTLINT_PRAGMA'):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project(tmp_path):
    """A small project with one violating and one clean component."""
    (tmp_path / 'src').mkdir()
    (tmp_path / 'src' / 'Foo.jsx').write_text(VIOLATING)
    (tmp_path / 'src' / 'Bar.jsx').write_text(CLEAN)
    (tmp_path / 'node_modules' / 'lib').mkdir(parents=True)
    (tmp_path / 'node_modules' / 'lib' / 'Baz.js').write_text(VIOLATING)
    (tmp_path / 'README.md').write_text('not code')
    return tmp_path


class TestCheckCommand:
    """`destructlint check`."""

    def test_json_report(self, project):
        result = runner.invoke(app, ['check', str(project), '--format', 'json'])

        assert result.exit_code == 1
        report = json.loads(result.stdout)
        by_file = {entry['filePath'].replace('\\', '/').split('/')[-1]: entry for entry in report}

        # node_modules is skipped, README is not a source file
        assert sorted(by_file) == ['Bar.jsx', 'Foo.jsx']
        assert by_file['Bar.jsx']['errorCount'] == 0
        messages = by_file['Foo.jsx']['messages']
        assert [m['messageId'] for m in messages] == ['useDestructAssignment']
        assert messages[0]['line'] == 2
        assert messages[0]['column'] == VIOLATING.splitlines()[1].index('props.x') + 1

    def test_clean_project_exits_zero(self, tmp_path):
        (tmp_path / 'Bar.jsx').write_text(CLEAN)
        result = runner.invoke(app, ['check', str(tmp_path)])

        assert result.exit_code == 0
        assert 'No problems found' in result.stdout

    def test_table_report(self, project):
        result = runner.invoke(app, ['check', str(project / 'src' / 'Foo.jsx')])

        assert result.exit_code == 1
        assert 'useDestructAssignment' in result.stdout
        assert '1 problem(s)' in result.stdout

    def test_never_mode_flag(self, project):
        result = runner.invoke(app, ['check', str(project / 'src'), '--mode', 'never', '--format', 'json'])

        report = json.loads(result.stdout)
        ids = [m['messageId'] for entry in report for m in entry['messages']]
        assert ids == ['noDestructPropsInSFCArg']

    def test_fix_rewrites_file(self, tmp_path):
        component = tmp_path / 'Foo.jsx'
        component.write_text("function Foo(props) {\n  const {a} = props;\n  return <p>{a}</p>;\n}\n")

        result = runner.invoke(app, ['check', str(component), '--destructure-in-signature', 'always', '--fix'])

        assert result.exit_code == 0
        assert component.read_text().startswith("function Foo({a}) {")
        assert 'Fixed 1 problem(s)' in result.stdout

    def test_invalid_mode(self, project):
        result = runner.invoke(app, ['check', str(project), '--mode', 'sometimes'])
        assert result.exit_code == 2

    def test_missing_path(self, tmp_path):
        result = runner.invoke(app, ['check', str(tmp_path / 'nope')])
        assert result.exit_code == 2

    def test_environment_mode(self, project, monkeypatch):
        monkeypatch.setenv('DESTRUCTLINT_MODE', 'never')
        result = runner.invoke(app, ['check', str(project / 'src' / 'Bar.jsx'), '--format', 'json'])

        report = json.loads(result.stdout)
        assert [m['messageId'] for m in report[0]['messages']] == ['noDestructPropsInSFCArg']


class TestInfoCommands:
    """`destructlint rules` and `destructlint version`."""

    def test_rules_lists_messages(self):
        result = runner.invoke(app, ['rules'])
        assert result.exit_code == 0
        for message_id in ('noDestructPropsInSFCArg', 'useDestructAssignment', 'destructureInSignature'):
            assert message_id in result.stdout

    def test_version(self):
        result = runner.invoke(app, ['version'])
        assert result.exit_code == 0
        assert 'destructlint' in result.stdout
