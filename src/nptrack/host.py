# MIT License
#
# Copyright (c) 2025 Alain Bernard
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the \"Software\"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED \"AS IS\", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
Module Name: host
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-22
Last updated: 2025-10-02

Summary:
    Services of the application hosting the track.

    The track notifies the host around each structural change of the scene:
    creation and destruction of nodes, modification of a node and change of
    parent. Production code uses the no-op implementation; an editor plugs in
    an implementation recording the changes for its undo stack.
"""

__all__ = ["HostServices", "NullHostServices", "RecordingHostServices"]

# ====================================================================================================
# Interface
# ====================================================================================================

class HostServices:
    """ Notifications sent by the track to its host. """

    def object_created(self, obj):
        """ `obj` has just been created. """
        raise NotImplementedError

    def object_destroyed(self, obj):
        """ `obj` is about to be destroyed. """
        raise NotImplementedError

    def object_changing(self, obj):
        """ `obj` is about to be modified. """
        raise NotImplementedError

    def reparent(self, node, new_parent):
        """ `node` is about to be moved under `new_parent`. """
        raise NotImplementedError

# ====================================================================================================
# No-op
# ====================================================================================================

class NullHostServices(HostServices):

    def object_created(self, obj):
        pass

    def object_destroyed(self, obj):
        pass

    def object_changing(self, obj):
        pass

    def reparent(self, node, new_parent):
        pass

# ====================================================================================================
# Journal
# ====================================================================================================

class RecordingHostServices(HostServices):
    """
    Journal of the notifications, as `(action, obj)` or `('reparent', node, new_parent)`
    tuples in the order they were received.
    """

    def __init__(self):
        self.journal = []

    def object_created(self, obj):
        self.journal.append(('created', obj))

    def object_destroyed(self, obj):
        self.journal.append(('destroyed', obj))

    def object_changing(self, obj):
        self.journal.append(('changing', obj))

    def reparent(self, node, new_parent):
        self.journal.append(('reparent', node, new_parent))

    def actions(self, action):
        """ Objects of the entries for a given action. """
        return [entry[1] for entry in self.journal if entry[0] == action]

    def clear(self):
        self.journal.clear()
