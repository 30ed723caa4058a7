"""Service layer — navigation orchestration and the reveal coordinator.

Services return :class:`~tasknav.services.result.ServiceResult`; only
programmer errors escape as exceptions.
"""
