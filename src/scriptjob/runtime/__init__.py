from scriptjob.runtime.interpreter import GuestInterpreter, scoped_interpreter

__all__ = ["GuestInterpreter", "scoped_interpreter"]
