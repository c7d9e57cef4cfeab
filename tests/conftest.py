import shutil
import textwrap
from pathlib import Path

import pytest
import sh

from git_versioning.situations import RefSituation

COMMIT = "0123456789abcdef0123456789abcdef01234567"
# 2023-11-14T22:13:20Z
TIMESTAMP = 1700000000

CONFIG = """\
<gitVersioning>
  <branch>
    <pattern>feature/(?&lt;feature&gt;.+)</pattern>
    <versionFormat>${branch}-SNAPSHOT</versionFormat>
  </branch>
  <branch>
    <pattern>main</pattern>
    <versionFormat>${commit.short}</versionFormat>
    <property>
      <name>app.label</name>
      <valueFormat>${value}-${branch}</valueFormat>
    </property>
  </branch>
  <tag>
    <pattern>v(?&lt;number&gt;.+)</pattern>
    <versionFormat>${number}</versionFormat>
  </tag>
</gitVersioning>
"""

ROOT_POM = """\
<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
    <modelVersion>4.0.0</modelVersion>
    <!-- root of the build -->
    <groupId>com.example</groupId>
    <artifactId>root</artifactId>
    <version>1.0.0-SNAPSHOT</version>
    <packaging>pom</packaging>

    <modules>
        <module>lib</module>
        <module>app</module>
    </modules>

    <properties>
        <app.label>demo</app.label>
        <java.version>17</java.version>
    </properties>

    <dependencyManagement>
        <dependencies>
            <dependency>
                <groupId>com.example</groupId>
                <artifactId>lib</artifactId>
                <version>1.0.0-SNAPSHOT</version>
            </dependency>
            <dependency>
                <groupId>junit</groupId>
                <artifactId>junit</artifactId>
                <version>4.13.2</version>
                <scope>test</scope>
            </dependency>
        </dependencies>
    </dependencyManagement>
</project>
"""

LIB_POM = """\
<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
    <modelVersion>4.0.0</modelVersion>
    <parent>
        <groupId>com.example</groupId>
        <artifactId>root</artifactId>
        <version>1.0.0-SNAPSHOT</version>
    </parent>
    <artifactId>lib</artifactId>
</project>
"""

APP_POM = """\
<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
    <modelVersion>4.0.0</modelVersion>
    <parent>
        <groupId>com.example</groupId>
        <artifactId>root</artifactId>
        <version>1.0.0-SNAPSHOT</version>
    </parent>
    <artifactId>app</artifactId>

    <dependencies>
        <dependency>
            <groupId>com.example</groupId>
            <artifactId>lib</artifactId>
            <version>1.0.0-SNAPSHOT</version>
        </dependency>
        <dependency>
            <groupId>junit</groupId>
            <artifactId>junit</artifactId>
        </dependency>
    </dependencies>

    <build>
        <plugins>
            <plugin>
                <artifactId>maven-jar-plugin</artifactId>
                <version>3.3.0</version>
            </plugin>
        </plugins>
    </build>
</project>
"""


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path) -> Path:
    """Multi-module build: root aggregating ``lib`` and ``app``, app depends on lib."""
    write(tmp_path / ".mvn" / "maven-git-versioning-extension.xml", CONFIG)
    write(tmp_path / "pom.xml", ROOT_POM)
    write(tmp_path / "lib" / "pom.xml", LIB_POM)
    write(tmp_path / "app" / "pom.xml", APP_POM)
    return tmp_path


@pytest.fixture
def situation(project) -> RefSituation:
    return RefSituation(
        head_commit=COMMIT,
        head_commit_timestamp=TIMESTAMP,
        head_branch="feature/login",
        root_dir=project,
    )


@pytest.fixture
def git_env(monkeypatch, tmp_path):
    """Isolated git identity and commit dates; skips without a git executable."""
    if shutil.which("git") is None:
        pytest.skip("git executable not found")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(tmp_path / ".gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    for role in ("AUTHOR", "COMMITTER"):
        monkeypatch.setenv(f"GIT_{role}_NAME", "Test")
        monkeypatch.setenv(f"GIT_{role}_EMAIL", "test@example.com")
        monkeypatch.setenv(f"GIT_{role}_DATE", f"{TIMESTAMP} +0000")


def init_repository(directory: Path):
    """Commit everything under ``directory`` on ``main`` and return the baked ``git``."""
    repo = sh.git.bake("-C", str(directory), _tty_out=False)
    repo("init", "-q")
    repo("symbolic-ref", "HEAD", "refs/heads/main")
    repo("add", "-A")
    repo("-c", "commit.gpgsign=false", "commit", "-q", "-m", "initial")
    return repo
