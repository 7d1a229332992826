from .corpus import generate_corpus_files, generate_flake_sources

__all__ = ["generate_corpus_files", "generate_flake_sources"]
