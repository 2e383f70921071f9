"""Kubernetes client wrapper."""

import json
import subprocess
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import KubectlNotFoundError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class K8sClient:
    """Wrapper for kubectl commands."""

    def __init__(
        self,
        context: Optional[str] = None,
        kubeconfig: Optional[str] = None,
        timeout: int = 60,
    ):
        self.context = context
        self.kubeconfig = kubeconfig
        self.timeout = timeout
        self._verify_kubectl()

    def _verify_kubectl(self):
        """Verify kubectl is available."""
        try:
            subprocess.run(
                ["kubectl", "version", "--client", "-o", "json"],
                capture_output=True,
                text=True,
                check=True,
            )
            logger.debug("kubectl verified successfully")
        except FileNotFoundError:
            raise KubectlNotFoundError("kubectl command not found. Please install kubectl.")
        except subprocess.CalledProcessError:
            logger.warning("kubectl verification failed")

    def _build_command(self, args: List[str], namespace: Optional[str] = None) -> List[str]:
        """Build kubectl command with kubeconfig, context and namespace."""
        cmd = ["kubectl"]

        if self.kubeconfig:
            cmd.extend(["--kubeconfig", self.kubeconfig])

        if self.context:
            cmd.extend(["--context", self.context])

        cmd.extend(args)

        if namespace and "--all-namespaces" not in args and "-n" not in args:
            cmd.extend(["-n", namespace])

        return cmd

    def execute(self, args: List[str], namespace: Optional[str] = None) -> Tuple[bool, str]:
        """Execute kubectl command and return success status and output."""
        cmd = self._build_command(args, namespace)
        logger.debug(f"Executing: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, check=True, timeout=self.timeout
            )
            return True, result.stdout
        except subprocess.CalledProcessError as e:
            logger.error(f"Command failed: {e.stderr}")
            return False, e.stderr
        except subprocess.TimeoutExpired:
            logger.error(f"Command timed out after {self.timeout}s: {' '.join(cmd)}")
            return False, f"timed out after {self.timeout}s"

    def _parse(self, success: bool, output: str) -> Tuple[bool, Any]:
        if not success:
            return False, output
        try:
            return True, json.loads(output)
        except json.JSONDecodeError:
            logger.error("Failed to parse JSON output")
            return False, "invalid JSON output"

    def get_json(
        self,
        resource_type: str,
        namespace: Optional[str] = None,
        all_namespaces: bool = False,
    ) -> Tuple[bool, Any]:
        """Get resource(s) as JSON.

        Returns ``(success, data)``; on failure ``data`` is the error text.
        """
        args = ["get", resource_type]

        if all_namespaces:
            args.append("--all-namespaces")

        args.extend(["-o", "json"])

        return self._parse(*self.execute(args, None if all_namespaces else namespace))

    def get_raw(self, path: str) -> Tuple[bool, Any]:
        """Read an API path directly, e.g. the metrics API."""
        return self._parse(*self.execute(["get", "--raw", path]))

    def get_version(self) -> Optional[Dict[str, Any]]:
        """Get cluster version information."""
        success, data = self._parse(*self.execute(["version", "-o", "json"]))
        return data if success else None
