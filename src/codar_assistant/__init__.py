"""Codar - a Slack coding assistant backed by OpenRouter models.

Answers questions in Slack assistant threads and in channel threads it takes
part in, summarizes channels on request, and lets each user pick the model
from the App Home tab.

Components:
- main_socket: Socket Mode entry point
- router: event dispatch table
- pipeline: involvement check and completion dispatch
- slack: Bolt wiring, history reads, Block Kit payloads
- llm: OpenRouter client, prompts, model catalog
- rendering: Markdown -> Slack mrkdwn
- store: per-user model preferences
"""
