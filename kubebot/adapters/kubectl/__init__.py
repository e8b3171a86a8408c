from kubebot.adapters.kubectl.executor import KubectlExecutor

__all__ = ["KubectlExecutor"]
