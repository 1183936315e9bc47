"""buildstash: build an artifact once per source fingerprint, deploy it many times.

Components:
  - Fingerprint engine over git-tracked content (``core.hasher``)
  - Artifact namer: ``{prefix}-{fingerprint}.tar.gz`` (``core.namer``)
  - Pluggable repository backends, local directory or S3 (``core.repository``)
  - tar.gz archive codec (``core.archive``)
  - Build, deploy and cleanup orchestration (``core.*_orchestrator``, ``core.cleanup``)
  - Typer CLI with Rich output (``cli``)
"""

__version__ = "0.1.0"
__description__ = (
    "Content-addressed build artifact cache with local and S3 repositories"
)

from buildstash.core.build_orchestrator import BuildOrchestrator
from buildstash.core.deploy_orchestrator import DeployOrchestrator
from buildstash.cli.app import app as cli

__all__ = ["BuildOrchestrator", "DeployOrchestrator", "cli", "__version__"]
