"""Application layer - Resolution of object graphs from a configuration."""

import logging
import threading
from typing import Any, Dict, List, Union

from bindgraph.application.circular_detector import CircularDependencyDetector
from bindgraph.application.configuration import Configuration
from bindgraph.application.lifetime_manager import LifetimeManager
from bindgraph.domain import (
    AmbiguousBindingError,
    ClassNode,
    ConflictError,
    ConstructionError,
    CyclicDependencyError,
    DependencyKind,
    IInjector,
    ILifetimeManager,
    MissingParameterError,
    NamedParameterNode,
    NoImplementationError,
    ResolutionError,
)

logger = logging.getLogger(__name__)

_MISSING = object()


class Injector(IInjector):
    """Builds fully-wired instances from an immutable configuration.

    Injectors are cheap and meant to live for one resolution session. Each
    owns its singleton cache, which is never shared with other injectors.
    Instances returned may hold external resources the caller must close.

    Attributes:
        _configuration: Bindings used for resolution.
        _class_hierarchy: Hierarchy of the configuration.
        _lifetime_manager: Singleton cache of this injector.
        _circular_detector: Active resolution path per thread.
        _volatile_instances: Instances supplied by the caller, keyed by class name.
    """

    def __init__(self, configuration: Configuration) -> None:
        """Initialize an injector over a configuration.

        Args:
            configuration: The bindings to resolve against.
        """
        self._configuration = configuration
        self._class_hierarchy = configuration.class_hierarchy
        self._lifetime_manager: ILifetimeManager = LifetimeManager()
        self._circular_detector = CircularDependencyDetector()
        self._volatile_instances: Dict[str, Any] = {}
        self._volatile_lock = threading.Lock()

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    def _class_target(self, target: Union[ClassNode, str]) -> ClassNode:
        node = self._class_hierarchy.lookup(target)
        if not isinstance(node, ClassNode):
            raise NoImplementationError([node.full_name], f"{node.full_name} is a {node.kind.value}, not a class")
        return node

    def get_instance(self, target: Union[ClassNode, str]) -> Any:
        """Resolve a fully-constructed instance of the target class.

        Args:
            target: Class node or its fully-qualified name.

        Returns:
            The instance, shared for singleton targets and fresh otherwise.

        Raises:
            NotFoundError: If the target name is unknown.
            NoImplementationError: If no concrete implementation exists.
            AmbiguousBindingError: If several implementations exist and none is bound.
            MissingParameterError: If a named parameter has no value and no default.
            CyclicDependencyError: If a node depends on itself.
            ConstructionError: If a constructor or factory raises.

        Example:
            >>> injector = Injector(configuration)
            >>> shape = injector.get_instance("shapes.Shape")
        """
        node = self._class_target(target)
        logger.debug("Resolving instance of %s", node.full_name)
        return self._resolve(node)

    def get_named_parameter(self, parameter: Union[NamedParameterNode, str]) -> Any:
        """Return the bound value of a named parameter, else its parsed default.

        Raises:
            MissingParameterError: If neither a bound value nor a default exists.
        """
        node = self._class_hierarchy.lookup(parameter)
        if not isinstance(node, NamedParameterNode):
            raise MissingParameterError([node.full_name], f"{node.full_name} is not a named parameter")
        return self._parameter_value(node, [])

    def is_injectable(self, target: Union[ClassNode, str]) -> bool:
        """Check whether ``get_instance`` could satisfy every dependency of the target.

        Nothing is constructed; failures raised by constructors themselves are
        not predicted.
        """
        try:
            self._check(self._class_target(target), [])
        except ResolutionError as e:
            logger.debug("%s is not injectable: %s", target, e)
            return False
        return True

    def bind_volatile_instance(self, target: Union[ClassNode, str], instance: Any) -> None:
        """Supply a ready-made instance returned for every later request of ``target``.

        Raises:
            ConflictError: If an instance is already supplied or cached for the target.
        """
        node = self._class_target(target)
        with self._volatile_lock:
            if node.full_name in self._volatile_instances or self._lifetime_manager.is_cached(node.full_name):
                raise ConflictError(f"An instance of '{node.full_name}' is already held by this injector")
            self._volatile_instances[node.full_name] = instance

    def _supplied_instance(self, node: ClassNode) -> Any:
        """Return an instance handed to this injector for ``node``, or ``_MISSING``."""
        return self._volatile_instances.get(node.full_name, _MISSING)

    def _resolve(self, node: ClassNode) -> Any:
        supplied = self._supplied_instance(node)
        if supplied is not _MISSING:
            return supplied

        self._circular_detector.push(node.full_name)
        try:
            if self._configuration.is_singleton(node):
                return self._lifetime_manager.get_or_create(node.full_name, lambda: self._construct(node))
            return self._construct(node)
        finally:
            self._circular_detector.pop()

    def _construct(self, node: ClassNode) -> Any:
        chain = self._circular_detector.current_chain()
        concrete = self._select_implementation(node, chain)
        if concrete is not node:
            return self._resolve(concrete)

        args: List[Any] = []
        for arg in node.constructor_args:
            dependency = self._class_hierarchy.get_node(arg.target)
            if arg.kind == DependencyKind.NAMED_PARAMETER:
                args.append(self._parameter_value(dependency, chain))
            else:
                args.append(self._resolve(dependency))

        builder = node.factory if node.is_external else node.constructor
        logger.debug("Constructing %s with %d arguments", node.full_name, len(args))
        try:
            return builder(*args)
        except ResolutionError:
            raise
        except Exception as e:
            kind = "external factory" if node.is_external else "constructor"
            raise ConstructionError(chain, f"{kind} of {node.full_name} failed: {e}") from e

    def _select_implementation(self, node: ClassNode, chain: List[str]) -> ClassNode:
        """Pick the class to construct for ``node``.

        Explicit binding first, then the declared default implementation, then
        the single concrete known implementation.
        """
        bound = self._configuration.get_bound_implementation(node)
        if bound is None and node.default_implementation is not None:
            bound = self._class_hierarchy.get_node(node.default_implementation)

        if bound is not None:
            if bound is node and node.is_abstract:
                raise NoImplementationError(chain, f"{node.full_name} is bound to itself but is abstract")
            return bound

        candidates = [impl for impl in self._class_hierarchy.get_known_implementations(node) if impl.is_concrete]
        if not candidates:
            raise NoImplementationError(chain, f"no implementation bound for {node.full_name}")
        if len(candidates) > 1:
            names = [impl.full_name for impl in candidates]
            raise AmbiguousBindingError(
                chain,
                f"{len(names)} implementations of {node.full_name} and none bound: {', '.join(names)}",
                names,
            )
        return candidates[0]

    def _parameter_value(self, parameter: NamedParameterNode, chain: List[str]) -> Any:
        if self._configuration.is_parameter_bound(parameter):
            return self._configuration.get_bound_parameter_value(parameter)
        if parameter.default_value is not None:
            return self._class_hierarchy.get_default_value(parameter)
        raise MissingParameterError(
            chain + [parameter.full_name],
            f"no value bound and no default for named parameter {parameter.full_name}",
        )

    def _check(self, node: ClassNode, path: List[str]) -> None:
        """Plan the resolution of ``node`` without constructing anything."""
        if self._supplied_instance(node) is not _MISSING or self._lifetime_manager.is_cached(node.full_name):
            return
        if node.full_name in path:
            cycle = path[path.index(node.full_name) :] + [node.full_name]
            raise CyclicDependencyError(path + [node.full_name], cycle)

        chain = path + [node.full_name]
        concrete = self._select_implementation(node, chain)
        if concrete is not node:
            self._check(concrete, chain)
            return

        for arg in node.constructor_args:
            dependency = self._class_hierarchy.get_node(arg.target)
            if arg.kind == DependencyKind.NAMED_PARAMETER:
                self._parameter_value(dependency, chain)
            else:
                self._check(dependency, chain)
