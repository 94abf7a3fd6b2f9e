# File: haplorefine/__init__.py
# Location: haplorefine/haplorefine/__init__.py

"""
haplorefine Package.

This package orchestrates a multi-round haplotype-resolved variant calling
pipeline: consensus computation, variant calling, read phasing and
haplotagging are driven through checkpointed stages that refine the calls
over two rounds of haplotype splitting and merging.
"""

from .version import __version__
