"""
Core abstractions for online training streams.

Data:
    Example                 Single (vector, label) item flowing through training
    to_example              Normalize (vector, label) pairs / bare vectors
    iter_examples           Lazily normalize a whole stream

Streams:
    ExampleStream           Ordered, replayable stream of examples
    load_examples_csv       Numeric CSV file -> ExampleStream

Partitioning:
    partition_examples      Disjoint index partitions for ensemble training
    PartitionStream         Resumable stream over one partition
"""

from .datasets import ExampleStream, load_examples_csv
from .items import Example, ExampleLike, iter_examples, to_example
from .partitioning import PartitionStream, partition_examples

__all__ = [
    "Example",
    "ExampleLike",
    "ExampleStream",
    "PartitionStream",
    "iter_examples",
    "load_examples_csv",
    "partition_examples",
    "to_example",
]
