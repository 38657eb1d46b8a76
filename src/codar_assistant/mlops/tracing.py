"""
MLflow tracing integration for LLM observability.
Provides span-based tracing around completion calls.
"""
import logging
import time
from typing import Optional, Dict, Any, List
from contextlib import contextmanager

import mlflow

logger = logging.getLogger(__name__)


class MLflowTracer:
    """Handles MLflow tracing for LLM observability."""

    def __init__(self, enabled: bool = False, tracking_uri: Optional[str] = None):
        self.enabled = enabled
        if self.enabled:
            try:
                if tracking_uri:
                    mlflow.set_tracking_uri(tracking_uri)
                logger.info("MLflow tracing enabled")
            except Exception as e:
                logger.warning(f"Failed to initialize MLflow tracing: {e}")
                self.enabled = False
        else:
            logger.debug("MLflow tracing disabled")

    @classmethod
    def from_settings(cls, settings) -> "MLflowTracer":
        return cls(
            enabled=settings.MLFLOW_ENABLE_TRACING,
            tracking_uri=settings.MLFLOW_TRACKING_URI,
        )

    @contextmanager
    def span(
        self,
        name: str,
        span_type: str = "UNKNOWN",
        attributes: Optional[Dict[str, Any]] = None,
        inputs: Optional[Dict[str, Any]] = None
    ):
        """
        Create a traced span for an operation.

        Args:
            name: Name of the span (e.g., "completion.thread_reply")
            span_type: Type of span (e.g., "LLM", "RETRIEVER", "CHAIN")
            attributes: Additional metadata for the span
            inputs: Input data to the operation
        """
        if not self.enabled:
            yield None
            return

        try:
            with mlflow.start_span(name=name, span_type=span_type) as span:
                if attributes:
                    span.set_attributes(attributes)
                if inputs:
                    span.set_inputs(inputs)

                start_time = time.time()
                yield span
                elapsed = time.time() - start_time
                span.set_attribute("latency_ms", int(elapsed * 1000))
        except Exception as e:
            logger.warning(f"Tracing span failed for {name}: {e}")
            raise

    def trace_llm_call(
        self,
        span,
        model: str,
        messages: List[Dict[str, str]],
        response_text: Optional[str],
        tokens: Optional[Dict[str, int]] = None
    ):
        """Record details of an LLM call on the given span."""
        if not self.enabled or span is None:
            return

        try:
            attributes = {
                "model": model,
                "message_count": len(messages),
                "prompt_length": sum(len(m.get("content") or "") for m in messages),
                "response_length": len(response_text or ""),
            }
            if tokens:
                attributes.update(tokens)
            span.set_attributes(attributes)
            span.set_outputs({"text": response_text})
        except Exception as e:
            logger.warning(f"Failed to trace LLM call: {e}")
