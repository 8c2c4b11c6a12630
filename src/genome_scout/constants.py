"""Project-wide constants."""

# -- Base client defaults ---------------------------------------------------
DEFAULT_TIMEOUT: float = 30.0
DEFAULT_MAX_RETRIES: int = 3
DEFAULT_MAX_POST_RETRIES: int = 1
DEFAULT_MAX_CONCURRENT_ANALYSES: int = 5

# -- UCSC Genome Browser ----------------------------------------------------
UCSC_BASE_URL: str = "https://api.genome.ucsc.edu"
UCSC_GENOMES_PATH: str = "/list/ucscGenomes"
UCSC_CHROMOSOMES_PATH: str = "/list/chromosomes"
UCSC_SEQUENCE_PATH: str = "/getData/sequence"
DEFAULT_ORGANISM: str = "Other"

# Substrings marking unplaced, unlocalized or alternate scaffolds.
NON_PRIMARY_CHROMOSOME_MARKERS: tuple[str, ...] = ("_", "Un", "random")

# -- NLM Clinical Tables gene search ----------------------------------------
GENE_SEARCH_URL: str = "https://clinicaltables.nlm.nih.gov/api/ncbi_genes/v3/search"
GENE_SEARCH_DISPLAY_FIELDS: tuple[str, ...] = (
    "chromosome",
    "Symbol",
    "description",
    "map_location",
    "type_of_gene",
)
GENE_SEARCH_EXTRA_FIELDS: tuple[str, ...] = GENE_SEARCH_DISPLAY_FIELDS + (
    "GenomicInfo",
    "GeneID",
)
GENE_SEARCH_PAGE_SIZE: int = 10

# -- NCBI E-utilities -------------------------------------------------------
NCBI_BASE_URL: str = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
ESEARCH_PATH: str = "/esearch.fcgi"
ESUMMARY_PATH: str = "/esummary.fcgi"
CLINVAR_PAGE_SIZE: int = 20

# -- Coordinates ------------------------------------------------------------
VIEWING_WINDOW: int = 10_000
LEGACY_ASSEMBLY: str = "hg19"
LEGACY_POSITION_FIELD: str = "chrpos37"
CURRENT_POSITION_FIELD: str = "chrpos38"

# -- Variant analysis -------------------------------------------------------
NUCLEOTIDES: frozenset[str] = frozenset("ACGT")
UNKNOWN_LABEL: str = "Unknown"
