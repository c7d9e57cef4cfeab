import pytest

from conftest import COMMIT, write
from git_versioning import documents, models, placeholders, synchronizers
from git_versioning.configs import PropertyRule, VersionRule
from git_versioning.coordinates import Coordinate
from git_versioning.errors import StructuralMismatch, UndefinedPlaceholder
from git_versioning.situations import RefSituation, RefType, ResolvedVersion

DEPENDENCY = """
    <dependency>
      <groupId>g</groupId>
      <artifactId>{artifact_id}</artifactId>
      <version>1.0.0</version>
    </dependency>"""

POM = """\
<?xml version="1.0" encoding="UTF-8"?>
<project>
  <parent>
    <groupId>g</groupId>
    <artifactId>parent</artifactId>
    <version>1.0.0</version>
  </parent>
  <artifactId>app</artifactId>
  <version>1.0.0</version>
  <properties>
    <label>demo</label>
    <untouched>x</untouched>
  </properties>
  <dependencies>{dependencies}
  </dependencies>
  <build>
    <pluginManagement>
      <plugins>
        <plugin>
          <groupId>g</groupId>
          <artifactId>tool</artifactId>
          <version>1.0.0</version>
        </plugin>
      </plugins>
    </pluginManagement>
  </build>
  <profiles>
    <profile>
      <id>dev</id>
      <properties>
        <label>dev</label>
      </properties>
      <dependencies>
        <dependency>
          <groupId>g</groupId>
          <artifactId>a</artifactId>
          <version>1.0.0</version>
        </dependency>
      </dependencies>
    </profile>
  </profiles>
</project>
"""

RELATED = frozenset(
    Coordinate("g", artifact_id) for artifact_id in ("parent", "app", "a", "b", "c", "tool")
)


def _pom(*artifact_ids: str) -> str:
    dependencies = "".join(DEPENDENCY.format(artifact_id=a) for a in artifact_ids)
    return POM.format(dependencies=dependencies)


def _resolved(version_format="${branch}-SNAPSHOT", properties=()) -> ResolvedVersion:
    rule = VersionRule(version_format, pattern="feature/.*", properties=properties)
    return ResolvedVersion(RefType.BRANCH, "feature/login", COMMIT, rule)


def _context(resolved: ResolvedVersion) -> dict[str, str]:
    situation = RefSituation(COMMIT, head_branch=resolved.ref_name)
    return placeholders.global_context(situation, resolved)


def _apply(file, resolved=None, related=RELATED, document=None) -> tuple[models.Model, bytes]:
    resolved = resolved or _resolved()
    model = models.read(file)
    data = synchronizers.apply(model, resolved, _context(resolved), related, document)
    return model, data


def test_all_related_versions_are_updated(tmp_path):
    file = write(tmp_path / "pom.xml", _pom("a", "b", "c"))

    model, data = _apply(file)

    assert model.version == "feature-login-SNAPSHOT"
    assert model.parent.version == "feature-login-SNAPSHOT"
    assert [d.version for d in model.dependencies] == ["feature-login-SNAPSHOT"] * 3
    assert model.build.plugin_management[0].version == "feature-login-SNAPSHOT"
    assert model.profiles[0].dependencies[0].version == "feature-login-SNAPSHOT"
    text = data.decode("utf-8")
    assert "1.0.0" not in text
    assert text.count("<version>feature-login-SNAPSHOT</version>") == 7


def test_derived_text_matches_model(tmp_path):
    file = write(tmp_path / "pom.xml", _pom("a", "b", "c"))

    _, data = _apply(file)
    derived = write(tmp_path / "derived" / "pom.xml", data.decode("utf-8"))
    model = models.read(derived)

    assert model.version == "feature-login-SNAPSHOT"
    assert [d.version for d in model.dependencies] == ["feature-login-SNAPSHOT"] * 3


def test_only_version_text_changes(tmp_path):
    text = _pom("a")
    file = write(tmp_path / "pom.xml", text)

    _, data = _apply(file)

    assert data.decode("utf-8") == text.replace(">1.0.0<", ">feature-login-SNAPSHOT<")


def test_unrelated_references_keep_their_version(tmp_path):
    file = write(tmp_path / "pom.xml", _pom("a", "b", "external"))

    model, data = _apply(file)

    assert [d.version for d in model.dependencies] == [
        "feature-login-SNAPSHOT",
        "feature-login-SNAPSHOT",
        "1.0.0",
    ]
    assert data.decode("utf-8").count("<version>1.0.0</version>") == 1


def test_unrelated_parent_keeps_its_version(tmp_path):
    file = write(tmp_path / "pom.xml", _pom("a"))

    model, _ = _apply(file, related=RELATED - {Coordinate("g", "parent")})

    assert model.parent.version == "1.0.0"
    assert model.version == "feature-login-SNAPSHOT"


def test_versionless_entries_stay_versionless(tmp_path):
    text = _pom("a").replace(
        "<artifactId>a</artifactId>\n      <version>1.0.0</version>",
        "<artifactId>a</artifactId>",
        1,
    )
    file = write(tmp_path / "pom.xml", text)

    model, _ = _apply(file)

    assert model.dependencies[0].version is None


def test_version_is_based_on_each_original_version(tmp_path):
    text = _pom("a").replace(
        "<artifactId>a</artifactId>\n      <version>1.0.0</version>",
        "<artifactId>a</artifactId>\n      <version>3.1.0-SNAPSHOT</version>",
        1,
    )
    file = write(tmp_path / "pom.xml", text)

    model, _ = _apply(file, resolved=_resolved("${version.release}-${branch.slug}"))

    assert model.version == "1.0.0-feature-login"
    assert model.dependencies[0].version == "3.1.0-feature-login"


def test_properties_are_rendered_with_value(tmp_path):
    file = write(tmp_path / "pom.xml", _pom("a"))
    resolved = _resolved(properties=(PropertyRule("label", "${value}-${branch.slug}"),))

    model, data = _apply(file, resolved=resolved)

    assert model.properties == {"label": "demo-feature-login", "untouched": "x"}
    assert model.profiles[0].properties == {"label": "dev-feature-login"}
    text = data.decode("utf-8")
    assert "<label>demo-feature-login</label>" in text
    assert "<label>dev-feature-login</label>" in text
    assert "<untouched>x</untouched>" in text


def test_apply_is_idempotent(tmp_path):
    file = write(tmp_path / "pom.xml", _pom("a", "b", "c"))

    _, first = _apply(file)
    _, second = _apply(file)

    assert first == second


def test_dependency_count_mismatch(tmp_path):
    file = write(tmp_path / "pom.xml", _pom("a", "b", "c"))
    model = models.read(file)
    document = documents.parse(_pom("a", "b"))
    resolved = _resolved()

    with pytest.raises(StructuralMismatch):
        synchronizers.apply(model, resolved, _context(resolved), RELATED, document)


def test_dependency_order_mismatch(tmp_path):
    file = write(tmp_path / "pom.xml", _pom("a", "b", "c"))
    model = models.read(file)
    document = documents.parse(_pom("a", "c", "b"))
    resolved = _resolved()

    with pytest.raises(StructuralMismatch):
        synchronizers.apply(model, resolved, _context(resolved), RELATED, document)


def test_profile_mismatch(tmp_path):
    file = write(tmp_path / "pom.xml", _pom("a"))
    model = models.read(file)
    document = documents.parse(_pom("a").replace("<id>dev</id>", "<id>prod</id>"))
    resolved = _resolved()

    with pytest.raises(StructuralMismatch):
        synchronizers.apply(model, resolved, _context(resolved), RELATED, document)


def test_undefined_placeholder(tmp_path):
    file = write(tmp_path / "pom.xml", _pom("a"))

    with pytest.raises(UndefinedPlaceholder):
        _apply(file, resolved=_resolved("${nope}"))


def test_write_replaces_derived_file(tmp_path):
    file = write(tmp_path / "pom.xml", _pom("a"))
    model = models.read(file)

    derived = synchronizers.write(model, b"<project>one</project>")
    synchronizers.write(model, b"<project>two</project>")

    assert derived == tmp_path / synchronizers.DERIVED_FILE_NAME
    assert derived.read_bytes() == b"<project>two</project>"
    assert sorted(p.name for p in tmp_path.iterdir()) == [".git-versioned-pom.xml", "pom.xml"]
    assert file.read_text(encoding="utf-8") == _pom("a")
