"""
llms.txt generator: turn a CrawlResult into llms.txt markdown, directly or via an AI rewrite.
"""
from .aeo import stream_aeo_llms_txt
from .generator import generate_llms_txt

__all__ = ["generate_llms_txt", "stream_aeo_llms_txt"]
