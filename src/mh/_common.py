from typing import Self

__all__ = ('Immutable',)

class Immutable:
    '''Base for value types which are frozen once __init__ returns.'''
    __slots__ = ()

    def __setattr__(self, name, value, /) -> None:
        raise TypeError(type(self).__name__ + " objects are immutable.")
    
    def __delattr__(self, name, /) -> None:
        raise TypeError(type(self).__name__ + " objects are immutable.")
    
    def __copy__(self) -> Self:
        return self
    
    def __deepcopy__(self, memo) -> Self:
        return self
