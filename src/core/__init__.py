"""
Core numeric building blocks: canonical representations, primitives,
sequence access and the concurrency policy.

Модули не зависят от слоя статистики (src.stats).
"""
