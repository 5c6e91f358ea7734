"""Asset import transformation & workload-classification engine.

Public entry points:
- ``asset_engine.sources``: source transformers and the transformation registry
- ``asset_engine.rules``: field resolver, operator evaluator, rule engine, rule test/explain
"""

__version__ = "0.1.0"
