"""Synthetic lab dataset generation.

This package generates the demo warehouse dataset used by the hands-on labs:
customers, users, subscriptions, invoices, platform usage, health scores,
NPS responses, support tickets and the sales pipeline.

Key Components:
- catalogs: Static weighted reference data (names, products, agents, stages)
- distributions: Weighted categorical sampling and calendar helpers
- fields: Declarative field-spec rules used to describe each entity
- generators: One generation stage per entity
- pipeline: Dependency-ordered stage scheduler with a bounded worker pool
- loaders: Pluggable sinks (memory, Parquet, CSV, Iceberg)
- reporting: Customer 360 and revenue summary projections

Example:
    >>> from labdata_synthetic.config import GeneratorConfig
    >>> from labdata_synthetic.pipeline import GenerationPipeline
    >>> from labdata_synthetic.loaders import ParquetSink, write_dataset
    >>>
    >>> dataset = GenerationPipeline(GeneratorConfig(seed=42, customers=50)).run()
    >>> write_dataset(dataset, ParquetSink("./lab-data"))
"""

from __future__ import annotations

__version__ = "0.1.0"
