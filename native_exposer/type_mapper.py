"""
Type mapping logic for rendering managed types as native C++ types
"""

from .constants import HANDLE_TYPE, NATIVE_TYPE_MAP
from .symbols import TypeCategory, TypeRef


class TypeMapper:
    """Maps managed type references to native display and bridge types"""

    def __init__(self):
        self.type_map = NATIVE_TYPE_MAP.copy()

    def display_type(self, type_ref: TypeRef) -> str:
        """Native type used in generated signatures

        Pointers render as their pointee followed by `*`. Primitives come
        from the fixed table; anything else is spelled by its qualified name
        from the global scope (`::A::B::Foo`).
        """
        if type_ref.category == TypeCategory.POINTER:
            # reference types cannot be pointees, so the pointee is a value type
            return self.display_type(type_ref.pointee) + "*"

        if type_ref.kind in self.type_map:
            return self.type_map[type_ref.kind]

        return "::" + "::".join(type_ref.segments)

    def bridge_type(self, type_ref: TypeRef) -> str:
        """Native type used when the value crosses the boundary

        Reference types travel as opaque handles.
        """
        if type_ref.is_reference_type:
            return HANDLE_TYPE
        return self.display_type(type_ref)
