from git_versioning import paths


def test_pom_file(tmp_path):
    (tmp_path / "module").mkdir()

    assert paths.pom_file(tmp_path) == tmp_path / "pom.xml"
    assert paths.pom_file(tmp_path, "module") == tmp_path / "module" / "pom.xml"
    assert paths.pom_file(tmp_path, "custom.xml") == tmp_path / "custom.xml"


def test_is_within(tmp_path):
    assert paths.is_within(tmp_path / "a" / "pom.xml", tmp_path)
    assert paths.is_within(tmp_path / "a" / ".." / "pom.xml", tmp_path)
    assert not paths.is_within(tmp_path / ".." / "pom.xml", tmp_path)
    assert not paths.is_within(tmp_path, tmp_path)


def test_find_up(tmp_path):
    (tmp_path / ".mvn").mkdir()
    (tmp_path / "a" / "b").mkdir(parents=True)

    assert paths.find_up(tmp_path / "a" / "b", ".mvn") == (tmp_path / ".mvn").resolve()


def test_canonical(tmp_path):
    (tmp_path / "real").mkdir()
    (tmp_path / "link").symlink_to(tmp_path / "real")

    assert paths.canonical(tmp_path / "link" / "pom.xml") == paths.canonical(tmp_path / "real" / "pom.xml")
