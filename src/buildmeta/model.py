# src/buildmeta/model.py
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field


class BuildInfo(BaseModel):
    """Variables of interest read from one common.mk file."""
    path: str
    name: Optional[str] = None
    usage_msg: Optional[str] = None
    install_dir: Optional[str] = None
    description: Optional[str] = None
    libs: List[str] = Field(default_factory=list)
    extra_libs: List[str] = Field(default_factory=list)
    cc_flags: List[str] = Field(default_factory=list)
    ld_flags: List[str] = Field(default_factory=list)
    other_vars: Dict[str, str] = Field(default_factory=dict)


class MakefileFacts(BaseModel):
    """Accumulated variable and command usage across makefiles."""
    files_analyzed: int = 0
    variables_used: Set[str] = Field(default_factory=set)
    variables_defined: Set[str] = Field(default_factory=set)
    commands_used: Set[str] = Field(default_factory=set)
