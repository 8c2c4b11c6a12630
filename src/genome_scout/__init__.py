"""genome-scout: normalized access to genome assemblies, genes, sequence and ClinVar."""

__version__ = "0.1.0"
