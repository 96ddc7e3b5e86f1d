"""Core domain package for narrator configs.

Core contains pattern compilation, the decision gate, and reload coordination
without any host, file, or speech-engine specific code, keeping the narration
logic portable.
"""
