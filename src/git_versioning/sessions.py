"""
Build session: resolves the versioning context once and processes descriptors.

A session is initialized lazily by the first descriptor it is asked to
process; that project roots the related project graph. Later descriptors are
processed only when they were declared as modules of an already processed
project, and each descriptor is processed at most once.
"""

import shutil
import threading
from collections import deque
from pathlib import Path
from typing import Callable

from git_versioning import (
    configs,
    git,
    graphs,
    logs,
    models,
    paths,
    placeholders,
    synchronizers,
    versions,
)
from git_versioning.configs import ConfigLocation, Configuration
from git_versioning.coordinates import Coordinate
from git_versioning.errors import GitContextUnavailable
from git_versioning.models import Model
from git_versioning.options import Options
from git_versioning.situations import RefSituation, ResolvedVersion
from git_versioning.synchronizers import Synchronizer

LOG = logs.logger(__file__)

SituationProvider = Callable[[Path], RefSituation]


class Session:
    def __init__(
        self,
        execution_root: Path | str | None = None,
        options: Options | None = None,
        situation_provider: SituationProvider | None = None,
        read_model: graphs.ModelReader = models.read,
    ):
        self.execution_root = paths.path(execution_root or Path.cwd())
        self.options = options or Options()
        self._situation_provider = situation_provider or git.situation
        self._read_model = read_model
        self._lock = threading.RLock()
        self._initialized = False
        self.disabled = False
        self.location: ConfigLocation | None = None
        self.config: Configuration | None = None
        self.situation: RefSituation | None = None
        self.resolved: ResolvedVersion | None = None
        self.update_pom = False
        self.related: frozenset[Coordinate] = frozenset()
        self.context: dict[str, str] = {}
        self.git_properties: dict[str, str] = {}
        self.synchronizer: Synchronizer | None = None
        self._models: dict[Path, Model] = {}
        self._project_modules: set[Path] = set()

    def process(self, pom_file: Path | str) -> Model:
        """
        Return the processed model for ``pom_file``.

        Skipped descriptors (disabled session, unknown module, undeterminable
        version) come back as read, without a derived file.
        """
        pom_file = paths.canonical(paths.pom_file(Path(pom_file)))
        with self._lock:
            if (model := self._models.get(pom_file)) is not None:
                LOG.debug(f"cached model - path:{pom_file}")
                return model
            model = self._read_model(pom_file)
            self._initialize(model)
            if self.disabled:
                return model
            if pom_file not in self._project_modules:
                LOG.debug(f"skip - unrelated pom location - path:{pom_file}")
                return model
            if model.coordinate.version is None:
                LOG.debug(f"skip - version could not be determined - path:{pom_file}")
                return model
            self._process(model)
            self._models[pom_file] = model
            return model

    def process_all(self, root_pom: Path | str) -> list[Model]:
        """Process ``root_pom`` and then its modules breadth first."""
        result: list[Model] = []
        queue = deque([paths.canonical(paths.pom_file(Path(root_pom)))])
        seen: set[Path] = set()
        while queue:
            pom_file = queue.popleft()
            if pom_file in seen:
                continue
            seen.add(pom_file)
            model = self.process(pom_file)
            result.append(model)
            for module_file in sorted(model.module_files()):
                if module_file.is_file():
                    queue.append(paths.canonical(module_file))
        return result

    def version(self, pom_file: Path | str) -> str | None:
        """Rendered version of a descriptor's project without writing anything."""
        pom_file = paths.canonical(paths.pom_file(Path(pom_file)))
        with self._lock:
            model = self._read_model(pom_file)
            self._initialize(model)
            coordinate = model.coordinate
            if self.disabled or coordinate.version is None:
                return coordinate.version
            return self.synchronizer.version(coordinate)

    def related_projects(self, pom_file: Path | str) -> frozenset[Coordinate]:
        with self._lock:
            self._initialize(self._read_model(paths.canonical(paths.pom_file(Path(pom_file)))))
            return self.related

    def _initialize(self, model: Model):
        if self._initialized:
            return
        self._init(model)
        self._initialized = True

    def _init(self, model: Model):
        LOG.info("")
        LOG.info(logs.header("git versioning"))

        self.location = configs.locate(self.execution_root)
        self.config = configs.read(self.location.config_file)
        for line in configs.describe(self.config):
            LOG.debug(line)

        if self.options.disable(self.config):
            LOG.info("skip - versioning is disabled")
            self.disabled = True
            return

        try:
            situation = self._situation_provider(self.execution_root)
        except GitContextUnavailable as e:
            LOG.warning(f"skip - project is not part of a git repository - error:{e}")
            self.disabled = True
            return
        if (tag := self.options.tag) is not None:
            situation = situation.with_tag(tag)
        if (branch := self.options.branch) is not None:
            situation = situation.with_branch(branch)
        self.situation = situation
        LOG.debug(
            f"git situation - commit:{situation.head_commit} branch:{situation.head_branch} "
            f"tags:{list(situation.head_tags)} clean:{situation.clean}"
        )

        self.resolved = versions.resolve(
            situation, self.config, self.options.prefer_tags(self.config)
        )
        rule = self.resolved.rule
        LOG.info(f"matching ref: {self.resolved}")
        LOG.info(f"ref configuration - pattern:{rule.pattern} format:{rule.version_format}")
        self.update_pom = self.options.update_pom(self.config, rule)

        repository_root = situation.root_dir or self.location.root_dir
        self.related = graphs.discover(
            model, self.location.root_dir, repository_root, self._read_model
        )
        for coordinate in sorted(self.related, key=str):
            LOG.debug(f"related project - coordinate:{coordinate}")
        self._project_modules.add(paths.canonical(model.pom_file))

        self.context = placeholders.global_context(
            situation,
            self.resolved,
            self.options.user_properties,
            self.options.environ,
        )
        self.git_properties = placeholders.git_properties(situation, self.resolved)
        self.synchronizer = Synchronizer(self.resolved, self.context, self.related)

    def _process(self, model: Model):
        LOG.info("")
        LOG.info(logs.header(model.coordinate.project_id))
        data = self.synchronizer.apply(model)
        model.properties.update(self.git_properties)
        derived_file = synchronizers.write(model, data)
        LOG.debug(f"derived pom - path:{derived_file}")
        if self.update_pom:
            LOG.debug(f"update pom - path:{model.pom_file}")
            shutil.copyfile(derived_file, model.pom_file)
        model.derived_file = derived_file
        self._project_modules.update(paths.canonical(f) for f in model.module_files())
