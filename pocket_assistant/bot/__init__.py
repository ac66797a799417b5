"""Telegram transport: handlers, argument parsing, reply rendering and outbound sends."""
