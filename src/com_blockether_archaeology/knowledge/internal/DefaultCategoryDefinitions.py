"""
Built-in category catalog.

Four mathematical categories form the refinement chain (ranks 1-4), three
natural-science categories continue it (ranks 5-7) and are externally
validated. The remaining computing categories carry rank 0.

Terms are matched case-insensitively on word boundaries with an optional
trailing "s"; a space or hyphen inside a term matches any single space,
underscore or hyphen.
"""

from typing import Any, Dict, List

DEFAULT_CATEGORY_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "id": "algebraicFoundations",
        "concepts": [
            "algebra", "linear algebra", "abstract algebra", "equation", "matrix", "vector",
            "polynomial", "quadratic", "linear", "system of equations", "determinant", "eigenvalue",
        ],
        "terms": [
            "algebra", "matrix", "vector", "equation", "polynomial", "quadratic", "linear",
            "determinant", "eigenvalue", "variable", "coefficient",
        ],
        "progression_rank": 1,
    },
    {
        "id": "geometricSystems",
        "concepts": [
            "geometry", "euclidean geometry", "non-euclidean", "analytical geometry", "coordinate",
            "point", "line", "plane", "angle", "triangle", "circle", "sphere", "polygon",
        ],
        "terms": [
            "geometry", "euclidean", "coordinate", "point", "line", "plane", "angle", "triangle",
            "circle", "sphere", "polygon", "vertex", "edge",
        ],
        "dependencies": ["algebraicFoundations"],
        "progression_rank": 2,
    },
    {
        "id": "trigonometricFunctions",
        "concepts": [
            "trigonometry", "sine", "cosine", "tangent", "radian", "degree", "wave",
            "amplitude", "frequency", "period", "phase", "harmonic", "oscillation",
        ],
        "terms": [
            "trigonometry", "sin", "sine", "cos", "cosine", "tan", "tangent", "radian", "degree",
            "wave", "amplitude", "frequency", "period", "phase", "harmonic", "oscillation",
        ],
        "dependencies": ["algebraicFoundations", "geometricSystems"],
        "progression_rank": 3,
    },
    {
        "id": "calculusAnalysis",
        "concepts": [
            "calculus", "differential", "integral", "derivative", "limit", "series", "taylor series",
            "convergence", "divergence", "optimization", "gradient", "partial derivative",
        ],
        "terms": [
            "calculus", "differential", "integral", "derivative", "limit", "series", "taylor",
            "convergence", "divergence", "optimization", "gradient", "partial",
        ],
        "dependencies": ["algebraicFoundations", "trigonometricFunctions"],
        "progression_rank": 4,
    },
    {
        "id": "physics",
        "concepts": [
            "physics", "mechanics", "thermodynamics", "quantum", "relativity", "energy", "force",
            "momentum", "acceleration", "velocity", "wave function", "particle", "field", "electromagnetic",
        ],
        "terms": [
            "physics", "mechanics", "thermodynamics", "quantum", "relativity", "energy", "force",
            "momentum", "acceleration", "velocity", "electromagnetic", "particle", "field",
        ],
        "dependencies": ["calculusAnalysis", "trigonometricFunctions"],
        "progression_rank": 5,
        "externally_validated": True,
    },
    {
        "id": "chemistry",
        "concepts": [
            "chemistry", "molecular", "atom", "element", "compound", "reaction", "bond", "orbital",
            "electron", "proton", "neutron", "periodic table", "organic", "inorganic", "catalyst",
        ],
        "terms": [
            "chemistry", "molecular", "atom", "element", "compound", "reaction", "bond", "orbital",
            "electron", "proton", "neutron", "periodic", "organic", "inorganic", "catalyst",
        ],
        "dependencies": ["physics", "calculusAnalysis"],
        "progression_rank": 6,
        "externally_validated": True,
    },
    {
        "id": "biology",
        "concepts": [
            "biology", "dna", "rna", "protein", "cell", "gene", "evolution", "organism", "species",
            "ecosystem", "genetics", "cellular", "molecular biology", "biochemistry", "bioinformatics",
        ],
        "terms": [
            "biology", "dna", "rna", "protein", "cell", "gene", "evolution", "organism", "species",
            "ecosystem", "genetics", "cellular", "biochemistry", "bioinformatics",
        ],
        "dependencies": ["chemistry", "physics"],
        "progression_rank": 7,
        "externally_validated": True,
    },
    {
        "id": "coreCS",
        "concepts": [
            "algorithm", "data structure", "complexity", "recursion", "iteration",
            "tree", "graph", "array", "list", "stack", "queue", "hash", "heap", "sort", "search",
        ],
        "terms": [
            "algorithm", "data structure", "complexity", "recursive", "iterate", "tree", "graph",
            "array", "list", "stack", "queue", "hash", "heap", "sort", "search",
        ],
        "dependencies": ["algebraicFoundations", "geometricSystems"],
    },
    {
        "id": "programmingLanguages",
        "concepts": [
            "javascript", "typescript", "python", "java", "c++", "c", "rust", "go", "ruby",
            "php", "swift", "kotlin", "scala", "haskell", "lisp", "assembly", "sql", "html", "css",
        ],
        "terms": [
            "javascript", "typescript", "python", "java", "rust", "golang", "ruby", "php", "swift",
            "kotlin", "scala", "haskell", "lisp", "assembly", "sql", "html", "css", "js", "ts", "py",
            "cpp", "rb",
        ],
    },
    {
        "id": "frameworks",
        "concepts": [
            "react", "vue", "angular", "node.js", "express", "django", "flask", "spring",
            "rails", "laravel", "symfony", "bootstrap", "jquery", "webpack", "babel", "typescript",
        ],
        "terms": [
            "react", "vue", "angular", "node.js", "nodejs", "express", "django", "flask", "spring",
            "rails", "laravel", "symfony", "bootstrap", "jquery", "webpack", "babel",
        ],
    },
    {
        "id": "modernCS",
        "concepts": [
            "machine learning", "artificial intelligence", "neural network", "deep learning",
            "natural language processing", "computer vision", "data science", "big data",
        ],
        "terms": [
            "machine learning", "ai", "artificial intelligence", "neural", "deep learning", "nlp",
            "computer vision", "data science", "big data",
        ],
    },
    {
        "id": "systemsArchitecture",
        "concepts": [
            "microservices", "distributed systems", "scalability", "load balancing", "caching",
            "database", "nosql", "sql", "api", "rest", "graphql", "event-driven", "messaging",
        ],
        "terms": [
            "microservices", "distributed", "scalability", "load balancing", "caching", "database",
            "nosql", "sql", "api", "rest", "graphql", "event driven", "messaging",
        ],
    },
    {
        "id": "webTech",
        "concepts": [
            "web development", "frontend", "backend", "full-stack", "responsive design",
            "pwa", "spa", "ssr", "ssg", "cdn", "http", "https", "websocket", "oauth",
        ],
        "terms": [
            "web development", "frontend", "backend", "full stack", "responsive", "pwa", "spa",
            "ssr", "ssg", "cdn", "http", "https", "websocket", "oauth",
        ],
    },
    {
        "id": "consciousness",
        "concepts": [
            "consciousness", "awareness", "meta-cognition", "self-awareness", "sentience",
            "artificial consciousness", "cognitive architecture", "mind uploading", "agi",
        ],
        "terms": [
            "consciousness", "awareness", "meta cognition", "self aware", "sentient", "cognitive",
            "artificial consciousness", "mind upload", "agi",
        ],
        "dependencies": ["modernCS", "physics", "biology"],
    },
    {
        "id": "revolutionary",
        "concepts": [
            "decentralized", "anarcho-syndicalist", "p2p", "peer-to-peer", "democratic technology",
            "open source", "commons", "cooperative", "mutual aid", "sovereignty", "blockchain",
        ],
        "terms": [
            "decentralized", "anarcho", "syndicalist", "p2p", "peer to peer", "democratic tech",
            "open source", "commons", "cooperative", "mutual aid", "sovereignty", "blockchain",
        ],
    },
    {
        "id": "sacredGeometry",
        "concepts": [
            "golden ratio", "phi", "fibonacci", "sacred geometry", "fractal", "mandala",
            "flower of life", "platonic solids", "geometric harmony", "mathematical beauty",
        ],
        "terms": [
            "golden ratio", "phi", "fibonacci", "sacred geometry", "fractal", "mandala",
            "flower of life", "platonic", "geometric harmony", "mathematical beauty",
        ],
        "dependencies": ["geometricSystems", "trigonometricFunctions"],
    },
    {
        "id": "emergingTech",
        "concepts": [
            "web3", "metaverse", "augmented reality", "virtual reality", "iot", "edge computing",
            "neuromorphic", "bio-computing", "swarm intelligence", "emergent systems", "quantum computing",
        ],
        "terms": [
            "web3", "metaverse", "augmented reality", "ar", "virtual reality", "vr", "iot",
            "edge computing", "neuromorphic", "bio computing", "swarm", "emergent", "quantum computing",
        ],
    },
    {
        "id": "security",
        "concepts": [
            "cybersecurity", "cryptography", "encryption", "authentication", "authorization",
            "blockchain security", "zero trust", "penetration testing", "vulnerability", "firewall",
        ],
        "terms": [
            "cybersecurity", "cryptography", "encryption", "authentication", "authorization",
            "zero trust", "penetration", "vulnerability", "firewall", "secure",
        ],
    },
    {
        "id": "devopsCloud",
        "concepts": [
            "devops", "ci/cd", "containerization", "docker", "kubernetes", "cloud computing",
            "aws", "azure", "gcp", "terraform", "ansible", "jenkins", "gitlab", "monitoring",
        ],
        "terms": [
            "devops", "ci/cd", "containerization", "docker", "kubernetes", "cloud", "aws", "azure",
            "gcp", "terraform", "ansible", "jenkins", "gitlab", "monitoring",
        ],
    },
]
