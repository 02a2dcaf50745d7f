"""LightCommand: remote buttons and UI requests to smart-lighting bridges via a durable command queue"""

__version__ = "1.0.0"
