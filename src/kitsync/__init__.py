"""kitsync: install AI-assistant kits across coding-tool providers.

Import from submodules:
- version: __version__
- operations.planner: reconcile
- operations.executor: PlanExecutor
- operations.ownership: classify_file, classify_batch
"""

from kitsync.version import __version__ as __version__
