"""Deploy pipeline core: version policy, workspace access, FSM and orchestration."""
