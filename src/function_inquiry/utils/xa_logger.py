"""
Structured logging of LLM calls.

Wraps the function that talks to the LLM and records one JSON file per call, plus a
running summary for the session, without changing what the call returns or raises.

/**
 * @file xa_logger.py
 * @purpose Per-call records and a session summary for every request made by an Inquiry.
 *
 * @notes
 * - Works with both sync and async LLM call functions.
 * - Only counts and hashes of the conversation are stored, not the API key or environment.
 * - Thread-safe: the call counter and the summary file are guarded by a lock.
 */

Usage:
    from function_inquiry.utils.xa_logger import enable_llm_logging

    logged_call, llm_logger = enable_llm_logging(call_llm_with_functions)
"""

import hashlib
import inspect
import json
import logging
import threading
import time
import uuid
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class LLMLogger:
    """
    Records every LLM call made through the wrapped function.
    """

    def __init__(self, log_dir: str = "llm_logs"):
        self.log_dir = Path(log_dir)
        self.session_id = str(uuid.uuid4())[:8]
        self.call_counter = 0
        self.lock = threading.Lock()

        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        self.session_dir = self.log_dir / f"session_{timestamp}_{self.session_id}"
        self.calls_dir = self.session_dir / "calls"
        self.calls_dir.mkdir(parents=True, exist_ok=True)
        self.summary_file = self.session_dir / "session_summary.json"

    def wrap_llm_call(self, call_llm: Callable) -> Callable:
        """
        Wrap an LLM call function with logging capability.

        The wrapper keeps the calling convention of the original: async functions stay async.
        """
        if inspect.iscoroutinefunction(call_llm):
            @wraps(call_llm)
            async def logged_call_async(*args, **kwargs):
                call_id, start_time = self._start_call()
                try:
                    response = await call_llm(*args, **kwargs)
                except Exception as e:
                    self.log_failed_call(call_id, kwargs, e, start_time)
                    raise
                self.log_successful_call(call_id, kwargs, response, start_time)
                return response

            return logged_call_async

        @wraps(call_llm)
        def logged_call(*args, **kwargs):
            call_id, start_time = self._start_call()
            try:
                response = call_llm(*args, **kwargs)
            except Exception as e:
                self.log_failed_call(call_id, kwargs, e, start_time)
                raise
            if inspect.isawaitable(response):
                return self._finish_awaitable(call_id, kwargs, response, start_time)
            self.log_successful_call(call_id, kwargs, response, start_time)
            return response

        return logged_call

    async def _finish_awaitable(self, call_id, kwargs, awaitable, start_time):
        try:
            response = await awaitable
        except Exception as e:
            self.log_failed_call(call_id, kwargs, e, start_time)
            raise
        self.log_successful_call(call_id, kwargs, response, start_time)
        return response

    def _start_call(self):
        with self.lock:
            self.call_counter += 1
            call_id = f"call_{self.call_counter:04d}_{uuid.uuid4().hex[:8]}"
        return call_id, time.time()

    def _request_metadata(self, call_id: str, kwargs: Dict[str, Any], start_time: float) -> Dict[str, Any]:
        messages = kwargs.get("messages") or []
        functions = kwargs.get("functions") or []
        return {
            "call_id": call_id,
            "session_id": self.session_id,
            "timestamp": datetime.fromtimestamp(start_time).isoformat(),
            "duration_seconds": round(time.time() - start_time, 3),
            "model": kwargs.get("model"),
            "temperature": kwargs.get("temperature"),
            "messages_count": len(messages),
            "messages_hash": _content_hash(messages),
            "last_role": messages[-1].get("role") if messages else None,
            "functions": [f.get("name") for f in functions],
        }

    def log_successful_call(self, call_id: str, kwargs: Dict[str, Any], response: Dict[str, Any], start_time: float):
        choices = (response or {}).get("choices") or []
        first = choices[0] if choices else {}
        function_call = first.get("function_call") or {}
        entry = {
            **self._request_metadata(call_id, kwargs, start_time),
            "status": "success",
            "choices_count": len(choices),
            "finish_reason": first.get("finish_reason"),
            "function_call": function_call.get("name"),
            "content_length": len(first.get("content") or ""),
        }
        self._save(call_id, entry)

    def log_failed_call(self, call_id: str, kwargs: Dict[str, Any], error: Exception, start_time: float):
        entry = {
            **self._request_metadata(call_id, kwargs, start_time),
            "status": "failed",
            "error_type": type(error).__name__,
            "error_message": str(error),
        }
        self._save(call_id, entry)

    def _save(self, call_id: str, entry: Dict[str, Any]):
        with open(self.calls_dir / f"{call_id}.json", 'w', encoding='utf-8') as f:
            json.dump(entry, f, indent=2, ensure_ascii=False)
        self.update_session_summary(entry)
        logger.debug("Logged %s (%s)", call_id, entry["status"])

    def update_session_summary(self, entry: Dict[str, Any]):
        """Update running session summary"""
        with self.lock:
            summary = self.read_summary() or {
                "session_id": self.session_id,
                "total_calls": 0,
                "successful_calls": 0,
                "failed_calls": 0,
                "function_calls": {},
                "error_types": {},
                "total_duration": 0,
                "last_updated": None,
            }

            summary["total_calls"] += 1
            summary["total_duration"] = round(summary["total_duration"] + entry["duration_seconds"], 3)
            summary["last_updated"] = datetime.now().isoformat()

            if entry["status"] == "success":
                summary["successful_calls"] += 1
                if entry.get("function_call"):
                    name = entry["function_call"]
                    summary["function_calls"][name] = summary["function_calls"].get(name, 0) + 1
            else:
                summary["failed_calls"] += 1
                error_type = entry.get("error_type", "Unknown")
                summary["error_types"][error_type] = summary["error_types"].get(error_type, 0) + 1

            with open(self.summary_file, 'w', encoding='utf-8') as f:
                json.dump(summary, f, indent=2, ensure_ascii=False)

    def read_summary(self) -> Optional[Dict[str, Any]]:
        if not self.summary_file.exists():
            return None
        with open(self.summary_file, 'r', encoding='utf-8') as f:
            return json.load(f)


def _content_hash(content: Any) -> str:
    content_str = json.dumps(content, sort_keys=True, ensure_ascii=False, default=str)
    return hashlib.md5(content_str.encode('utf-8')).hexdigest()


# Convenience function for easy integration
def enable_llm_logging(call_llm_function: Callable, log_dir: str = "llm_logs") -> tuple:
    """
    Enable logging for an LLM call function

    Args:
        call_llm_function: The original LLM call function
        log_dir: Directory to store logs

    Returns:
        tuple: (wrapped_function, logger_instance)
    """
    llm_logger = LLMLogger(log_dir=log_dir)
    return llm_logger.wrap_llm_call(call_llm_function), llm_logger
