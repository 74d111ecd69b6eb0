from spotguess.services.game.commands import PlayerJoin


def join(session, sid, name, team_name):
    return session.dispatch(PlayerJoin(sid=sid, name=name, team_name=team_name))


def events(notifications):
    return [n.event for n in notifications]


def find(notifications, event):
    return [n for n in notifications if n.event == event]


def team_id(session, name):
    for team in session.registry.teams.values():
        if team.name == name:
            return team.id
    raise KeyError(name)
