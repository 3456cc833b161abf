"""
Programmatic entry point.

AutomationAPI runs a complete automation from Python code and returns the
results in their JSON wire format, without writing anything to disk.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .automation import AutomationRunner
from .config import find_flows_file, load_flows_file, validate_automation_config
from .models.flows import ProgrammaticFlow
from .storage import results_to_dict
from .validation import FlowSetError

logger = logging.getLogger(__name__)


class AutomationAPI:
    """
    Facade over AutomationRunner for library callers.

    Example:
        results = AutomationAPI.run(page="http://localhost:3000", average_of=3)
        results["average-login"][0]["logs"]
    """

    @staticmethod
    def build_runner(
        page: str,
        average_of: int = 1,
        include_mount: bool = False,
        headless: bool = True,
        scenarios: Optional[Sequence[ProgrammaticFlow]] = None,
        flows: Optional[Mapping[str, List[str]]] = None,
        cwd: Optional[Path] = None,
        settings: Optional[Dict[str, Any]] = None,
        **runner_kwargs: Any,
    ) -> AutomationRunner:
        """
        Build a runner from keyword options.

        Args:
            page: URL of the page under test
            average_of: Number of repetitions to run and average
            include_mount: Record the mount render under ``Mount``
            headless: Run the browser headless
            scenarios: Programmatic flows; take precedence over ``flows``
            flows: Mapping of flow name to action tokens
            cwd: Directory searched for a flow file when neither ``scenarios``
                nor ``flows`` is given; defaults to the current directory
            settings: Extra ``[automation]`` tables (retry, aggregation, ...)
            **runner_kwargs: Passed to AutomationRunner (store, page provider)

        Raises:
            ValidationError: If an option is invalid
            FlowSetError: If no flow definitions can be found
        """
        automation_data: Dict[str, Any] = {
            key: dict(value) for key, value in (settings or {}).items()
        }
        automation_data.setdefault("general", {}).update(
            {"average_of": average_of, "include_mount": include_mount, "output": "json"}
        )
        automation_data.setdefault("browser", {}).update({"url": page, "headless": headless})

        base_dir = Path(cwd) if cwd is not None else Path.cwd()
        automation_config = validate_automation_config(automation_data, base_dir)

        flow_set: Any
        if scenarios is not None:
            flow_set = list(scenarios)
        elif flows is not None:
            flow_set = flows
        else:
            flows_path = find_flows_file(base_dir)
            if flows_path is None:
                raise FlowSetError.from_exception(FileNotFoundError())
            flow_set = load_flows_file(flows_path)
            logger.info(f"Loaded flow definitions from {flows_path}")

        return AutomationRunner(automation_config, flow_set, **runner_kwargs)

    @staticmethod
    async def run_async(page: str, **options: Any) -> Dict[str, List[Dict[str, Any]]]:
        """Async variant of ``run`` for callers that already own an event loop."""
        runner = AutomationAPI.build_runner(page, **options)
        return results_to_dict(await runner.run_async())

    @staticmethod
    def run(page: str, **options: Any) -> Dict[str, List[Dict[str, Any]]]:
        """
        Run the automation and return the results in JSON wire format.

        Accepts the keyword options of ``build_runner``.

        Returns:
            Mapping of flow key to a list of ``{"logs", "numberOfInteractions", "id"}``
        """
        runner = AutomationAPI.build_runner(page, **options)
        return results_to_dict(runner.run())
