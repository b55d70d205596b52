"""Method registry for multicast RPC servers."""

from __future__ import annotations

import inspect
import logging
import types
from dataclasses import dataclass, field
from typing import Any

from pydantic import PydanticUserError, TypeAdapter

from mcast_rpc import logs
from mcast_rpc.decorators import (
    CallingConventionError,
    get_rpc_name,
    inspect_calling_convention,
)
from mcast_rpc.exceptions import MethodNotFoundError, RegistrationError
from mcast_rpc.protocols import MethodDescriptor

logger = logging.getLogger("mcast_rpc")


@dataclass
class Service:
    """A registered receiver and the methods exposed from it.

    Attributes
    ----------
    name : str
        Service part of the ``Service.Method`` wire name.
    receiver : Any
        The registered instance.
    methods : dict[str, MethodDescriptor]
        Exposed methods keyed by method name.
    """

    name: str
    receiver: Any
    methods: dict[str, MethodDescriptor] = field(default_factory=dict)


class MethodRegistry:
    """Registry mapping ``Service.Method`` names to method descriptors.

    Services are registered once at startup. Registering the same service
    name twice fails, and the registry refuses new registrations once it is
    frozen, which servers do before reading their first datagram. After that
    the registry is read-only.

    Attributes
    ----------
    _services : dict[str, Service]
        Registered services keyed by name.
    _frozen : bool
        Whether registration is closed.
    """

    def __init__(self) -> None:
        """Initialize the registry."""
        self._services: dict[str, Service] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Close registration. Later calls to :meth:`register` fail."""
        self._frozen = True

    def register(self, receiver: Any, name: str) -> Service:
        """Expose the conforming methods of ``receiver`` under ``name``.

        Every plain function defined on the receiver's class (inherited ones
        included) whose name does not start with an underscore is checked
        against the calling convention. Non-conforming functions are skipped.

        Parameters
        ----------
        receiver : Any
            Object whose methods become remotely callable.
        name : str
            Service name, the part before the dot in wire method names.

        Returns
        -------
        Service
            The new registration.

        Raises
        ------
        RegistrationError
            If registration is closed, the name is invalid or already taken,
            or the receiver has no conforming methods.
        """
        if self._frozen:
            msg = f"Cannot register service '{name}': registration is closed"
            raise RegistrationError(msg)
        if not name or "." in name:
            msg = f"Invalid service name: {name!r}"
            raise RegistrationError(msg)
        if name in self._services:
            msg = f"Service '{name}' is already registered"
            raise RegistrationError(msg)

        service = Service(name=name, receiver=receiver)
        for attr in dir(type(receiver)):
            if attr.startswith("_"):
                continue
            func = inspect.getattr_static(type(receiver), attr)
            if not isinstance(func, types.FunctionType):
                continue
            descriptor = self._build_descriptor(service, func)
            if descriptor is None:
                continue
            if descriptor.method_name in service.methods:
                msg = f"Service '{name}' exposes '{descriptor.method_name}' twice"
                raise RegistrationError(msg)
            service.methods[descriptor.method_name] = descriptor

        if not service.methods:
            msg = f"Type {type(receiver).__name__} has no suitable methods"
            raise RegistrationError(msg)

        self._services[name] = service
        logger.info(logs.SERVICE_REGISTERED, name, ", ".join(sorted(service.methods)))
        return service

    def _build_descriptor(
        self, service: Service, func: types.FunctionType
    ) -> MethodDescriptor | None:
        method_name = get_rpc_name(func)
        try:
            argument_type, reply_type = inspect_calling_convention(func)
            argument_shape = TypeAdapter(argument_type)
            reply_shape = TypeAdapter(reply_type)
        except (CallingConventionError, PydanticUserError) as e:
            logger.debug(logs.METHOD_SKIPPED, service.name, func.__name__, e)
            return None

        return MethodDescriptor(
            service_name=service.name,
            method_name=method_name,
            func=func,
            receiver=service.receiver,
            argument_shape=argument_shape,
            reply_shape=reply_shape,
        )

    def resolve(self, method: str) -> MethodDescriptor:
        """Find the descriptor for a ``Service.Method`` wire name.

        Parameters
        ----------
        method : str
            Fully qualified method name.

        Returns
        -------
        MethodDescriptor
            The registered method.

        Raises
        ------
        MethodNotFoundError
            If the name is ill-formed or nothing is registered under it.
        """
        service_name, dot, method_name = method.partition(".")
        if not dot or not service_name or not method_name or "." in method_name:
            raise MethodNotFoundError(
                method, f"service/method request ill-formed: '{method}'"
            )

        service = self._services.get(service_name)
        if service is None:
            raise MethodNotFoundError(method, f"can't find service '{service_name}'")

        descriptor = service.methods.get(method_name)
        if descriptor is None:
            raise MethodNotFoundError(method, f"can't find method '{method}'")
        return descriptor

    def get_service(self, name: str) -> Service | None:
        """Get a registered service by name."""
        return self._services.get(name)

    def has_method(self, method: str) -> bool:
        """Check if a ``Service.Method`` name resolves."""
        try:
            self.resolve(method)
        except MethodNotFoundError:
            return False
        return True

    def list_method_names(self) -> list[str]:
        """List all fully qualified method names, sorted."""
        return sorted(
            descriptor.full_name
            for service in self._services.values()
            for descriptor in service.methods.values()
        )

    def describe(self) -> dict[str, Any]:
        """Generate a JSON-serializable description of every exposed method.

        Returns
        -------
        dict[str, Any]
            ``{"jsonrpc": "2.0", "methods": [...]}`` where each method entry
            carries its name, docstring and the JSON schemas of its argument
            and reply shapes.
        """
        methods_list = []
        for method_name in self.list_method_names():
            descriptor = self.resolve(method_name)
            try:
                methods_list.append(descriptor.describe())
            except PydanticUserError as e:
                logger.warning(logs.INTROSPECTION_FAILED, method_name, e)

        return {"jsonrpc": "2.0", "methods": methods_list}
